from __future__ import annotations
import logging
import os
import stat as statmod
import time
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Set, Tuple, Union

from .config import ScanConfig
from .models import (
    Node, ScanStats, ScanIssue, nodes_to_json,
    METADATA_UNREADABLE, DIRECTORY_UNLISTABLE, SYMLINK_CYCLE,
)
from .throttle import EmitThrottle

logger = logging.getLogger(__name__)

ProgressSink = Callable[[str], None]  # JSON array of the children just completed


def display_name(path: str) -> str:
    # undecodable bytes become U+FFFD so names always encode as UTF-8
    return os.fsencode(path).decode("utf-8", "replace")


class CancelFlag:
    def __init__(self):
        self._cancel = False

    def cancel(self):
        self._cancel = True

    def __call__(self):
        return self._cancel


class OsFilesystem:
    """stat / listdir provider backed by the os module."""

    def stat(self, path: str, follow_symlinks: bool = True) -> os.stat_result:
        return os.stat(path, follow_symlinks=follow_symlinks)

    def list_dir(self, path: str) -> List[str]:
        # read the whole listing up front so the handle is closed before descending
        with os.scandir(path) as it:
            return [entry.path for entry in it]


@dataclass
class _Frame:
    path: str
    key: Optional[Tuple[int, int]]
    entries: List[str]
    pos: int = 0
    size: int = 0
    children: List[Node] = field(default_factory=list)


class Scanner:
    """Post-order size aggregation over a directory tree.

    scan() never raises for filesystem errors: unreadable entries and
    unlistable directories come back as zero-size leaves and are recorded
    in ``stats.issues``.
    """

    def __init__(self,
                 config: Optional[ScanConfig] = None,
                 throttle: Optional[EmitThrottle] = None,
                 sink: Optional[ProgressSink] = None,
                 fs=None,
                 cancel_flag: Optional[Callable[[], bool]] = None):
        self.config = config or ScanConfig()
        self.throttle = throttle or EmitThrottle(self.config.emit_interval)
        self.sink = sink
        self.fs = fs or OsFilesystem()
        self.cancel_flag = cancel_flag
        self.stats = ScanStats()
        self._active: Set[Tuple[int, int]] = set()

    def scan(self, path: Union[str, os.PathLike]) -> Node:
        path = os.fspath(path)
        self.stats = ScanStats()
        self._active = set()
        t0 = time.monotonic()

        root = self._open(path)
        stack: List[_Frame] = []
        if isinstance(root, _Frame):
            stack.append(root)

        while stack:
            frame = stack[-1]
            if frame.pos < len(frame.entries) and not self._cancelled():
                child_path = frame.entries[frame.pos]
                frame.pos += 1
                child = self._open(child_path)
                if isinstance(child, _Frame):
                    stack.append(child)
                else:
                    self._adopt(frame, child)
                continue

            stack.pop()
            node = self._close(frame)
            if stack:
                self._adopt(stack[-1], node)
            else:
                root = node

        self.stats.elapsed_sec = time.monotonic() - t0
        logger.info("scanned %s: %d bytes retained, %d files, %d dirs, %d issues%s",
                    path, root.size, self.stats.files, self.stats.dirs,
                    len(self.stats.issues), " (cancelled)" if self.stats.cancelled else "")
        return root

    def _cancelled(self) -> bool:
        if self.cancel_flag and self.cancel_flag():
            self.stats.cancelled = True
            return True
        return False

    def _open(self, path: str) -> Union[Node, _Frame]:
        try:
            st = self.fs.stat(path, follow_symlinks=self.config.follow_symlinks)
        except OSError as e:
            self._issue(METADATA_UNREADABLE, path, e)
            return Node(display_name(path))

        mode = st.st_mode
        if statmod.S_ISREG(mode):
            self.stats.files += 1
            return Node(display_name(path), int(st.st_size))
        if not statmod.S_ISDIR(mode):
            return Node(display_name(path))

        key = (st.st_dev, st.st_ino) if st.st_ino else None
        if key is not None and key in self._active:
            self._issue(SYMLINK_CYCLE, path, "directory already on the current descent path")
            return Node(display_name(path))

        try:
            entries = self.fs.list_dir(path)
        except OSError as e:
            self._issue(DIRECTORY_UNLISTABLE, path, e)
            return Node(display_name(path))

        if key is not None:
            self._active.add(key)
        return _Frame(path, key, entries)

    def _adopt(self, frame: _Frame, child: Node):
        if child.size >= self.config.threshold:
            frame.children.append(child)
            frame.size += child.size
        else:
            self.stats.dropped += 1

    def _close(self, frame: _Frame) -> Node:
        if frame.key is not None:
            self._active.discard(frame.key)
        self.stats.dirs += 1
        node = Node(display_name(frame.path), frame.size, tuple(frame.children))
        if self.throttle.try_emit(lambda: self._send(node.children)):
            self.stats.emissions += 1
        return node

    def _send(self, children):
        if self.sink is None:
            return
        self.sink(nodes_to_json(children))

    def _issue(self, kind: str, path: str, err):
        logger.debug("%s: %s (%s)", kind, path, err)
        self.stats.issues.append(ScanIssue(kind, path, str(err)))


def scan_path(path: Union[str, os.PathLike],
              threshold: Optional[int] = None,
              sink: Optional[ProgressSink] = None,
              **kw) -> Node:
    config = kw.pop("config", None) or ScanConfig.from_env(threshold=threshold)
    return Scanner(config=config, sink=sink, **kw).scan(path)
