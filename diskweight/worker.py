from __future__ import annotations
from typing import Optional

from PySide6.QtCore import QThread, Signal

from .config import ScanConfig
from .scanner import CancelFlag, Scanner
from .throttle import EmitThrottle


class ScanThread(QThread):
    progress = Signal(str)   # JSON array of freshly completed subtrees
    done = Signal(object)    # root Node
    error = Signal(str)

    def __init__(self, path: str, config: Optional[ScanConfig] = None,
                 throttle: Optional[EmitThrottle] = None):
        super().__init__()
        self.path = path
        self.cancel_flag = CancelFlag()
        self.scanner = Scanner(config=config, throttle=throttle,
                               sink=self.progress.emit, cancel_flag=self.cancel_flag)

    def cancel(self):
        self.cancel_flag.cancel()

    def run(self):
        try:
            res = self.scanner.scan(self.path)
            self.done.emit(res)
        except Exception as e:
            self.error.emit(str(e))
