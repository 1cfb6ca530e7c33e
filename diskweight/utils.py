from __future__ import annotations
import logging
import os
import subprocess
import sys
from typing import List, Optional

logger = logging.getLogger(__name__)

_UNITS = ("KiB", "MiB", "GiB", "TiB", "PiB")


def format_bytes(num: int) -> str:
    """Binary-unit size label, e.g. 5242880 -> '5.0 MiB'."""
    if num < 1024:
        return f"{num} B"
    value = float(num)
    unit = "B"
    for unit in _UNITS:
        value /= 1024.0
        if value < 1024.0:
            break
    return f"{value:.1f} {unit}"


def reveal_command(path: str, platform: Optional[str] = None) -> List[str]:
    platform = platform or sys.platform
    if platform.startswith("win"):
        return ["explorer", "/select,", path]
    if platform == "darwin":
        return ["open", "-R", path]
    # xdg-open has no select mode; open the containing folder instead
    folder = path if os.path.isdir(path) else os.path.dirname(path)
    return ["xdg-open", folder]


def reveal_in_file_manager(path: str) -> Optional[str]:
    """Show ``path`` in the platform file browser.

    Returns None once the command is launched, otherwise the error text.
    """
    if not path:
        return "empty path"
    cmd = reveal_command(os.path.abspath(path))
    try:
        subprocess.Popen(cmd)
    except OSError as e:
        logger.warning("could not reveal %s: %s", path, e)
        return str(e)
    return None
