from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace
import stat as statmod

import pytest

MIB = 1024 * 1024


def make_file(path: Path, size: int) -> Path:
    """Create a sparse file of exactly ``size`` bytes."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("wb") as fh:
        fh.truncate(size)
    return path


class FakeClock:
    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeFilesystem:
    """In-memory filesystem provider.

    ``tree`` maps a path to either an int (file length) or a dict of
    child name -> subtree. Paths listed in ``unreadable`` fail stat,
    paths in ``unlistable`` fail listing and paths in ``fifos`` stat as
    named pipes.
    """

    def __init__(self, tree, root="/r", unreadable=(), unlistable=(), fifos=()):
        self.entries = {}
        self.unreadable = set(unreadable)
        self.unlistable = set(unlistable)
        self.fifos = set(fifos)
        self._ino = 0
        self._add(root, tree)

    def _add(self, path, value):
        self._ino += 1
        if isinstance(value, dict):
            self.entries[path] = (statmod.S_IFDIR | 0o755, 0, self._ino,
                                  [f"{path}/{name}" for name in value])
            for name, sub in value.items():
                self._add(f"{path}/{name}", sub)
        else:
            self.entries[path] = (statmod.S_IFREG | 0o644, value, self._ino, None)

    def stat(self, path, follow_symlinks=True):
        if path in self.unreadable or path not in self.entries:
            raise PermissionError(13, "Permission denied", path)
        mode, size, ino, _ = self.entries[path]
        if path in self.fifos:
            mode = statmod.S_IFIFO | 0o644
        return SimpleNamespace(st_mode=mode, st_size=size, st_dev=1, st_ino=ino)

    def list_dir(self, path):
        if path in self.unlistable:
            raise PermissionError(13, "Permission denied", path)
        return list(self.entries[path][3])


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()
