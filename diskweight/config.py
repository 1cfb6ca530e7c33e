"""
Scan settings.
Environment variables (DISKWEIGHT_*) override defaults via ScanConfig.from_env().
"""
from __future__ import annotations
import os
from dataclasses import dataclass, fields
from typing import Mapping, Optional

DEFAULT_THRESHOLD = 5 * 1024 * 1024   # bytes; smaller subtrees are dropped
DEFAULT_EMIT_INTERVAL = 5.0           # seconds between progress payloads

ENV_PREFIX = "DISKWEIGHT_"


_TRUE = ("true", "1", "yes", "on")
_FALSE = ("false", "0", "no", "off")


def _parse_bool(value: str) -> bool:
    v = value.strip().lower()
    if v in _TRUE:
        return True
    if v in _FALSE:
        return False
    raise ValueError(value)


@dataclass(frozen=True)
class ScanConfig:
    threshold: int = DEFAULT_THRESHOLD
    emit_interval: float = DEFAULT_EMIT_INTERVAL
    follow_symlinks: bool = True

    def __post_init__(self):
        if self.threshold < 0:
            raise ValueError(f"threshold must be >= 0, got {self.threshold}")
        if self.emit_interval <= 0:
            raise ValueError(f"emit_interval must be > 0, got {self.emit_interval}")

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None, **overrides) -> "ScanConfig":
        """Build a config from DISKWEIGHT_THRESHOLD, DISKWEIGHT_EMIT_INTERVAL
        and DISKWEIGHT_FOLLOW_SYMLINKS; explicit keyword overrides win."""
        env = os.environ if environ is None else environ
        values = {}
        for f in fields(cls):
            raw = env.get(ENV_PREFIX + f.name.upper())
            if raw is None:
                continue
            try:
                if f.name == "threshold":
                    values[f.name] = int(raw)
                elif f.name == "emit_interval":
                    values[f.name] = float(raw)
                else:
                    values[f.name] = _parse_bool(raw)
            except ValueError:
                raise ValueError(f"invalid {ENV_PREFIX}{f.name.upper()}: {raw!r}") from None
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)
