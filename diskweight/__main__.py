"""Command line runner: compute usage for a path and print it as JSON."""
from __future__ import annotations
import argparse
import logging
import os
import sys
from typing import List, Optional

from .config import ScanConfig
from .scanner import Scanner
from .utils import format_bytes


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="diskweight",
                                description="Find the subtrees that take up the most disk space.")
    p.add_argument("path", nargs="?", default=os.path.expanduser("~"),
                   help="root to scan (default: home directory)")
    p.add_argument("--threshold", type=int, default=None,
                   help="drop subtrees smaller than this many bytes (default 5 MiB)")
    p.add_argument("--interval", type=float, default=None,
                   help="seconds between progress payloads (default 5)")
    p.add_argument("--no-follow-symlinks", action="store_true",
                   help="stat links themselves instead of their targets")
    p.add_argument("--progress", action="store_true",
                   help="print progress payloads to stderr while scanning")
    p.add_argument("--indent", type=int, default=None, help="indent the JSON output")
    p.add_argument("-v", "--verbose", action="count", default=0)
    return p


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    level = logging.WARNING if args.verbose == 0 else logging.INFO if args.verbose == 1 else logging.DEBUG
    logging.basicConfig(level=level, stream=sys.stderr,
                        format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    try:
        config = ScanConfig.from_env(
            threshold=args.threshold,
            emit_interval=args.interval,
            follow_symlinks=False if args.no_follow_symlinks else None,
        )
    except ValueError as e:
        print(f"diskweight: {e}", file=sys.stderr)
        return 2

    def sink(payload: str):
        print(payload, file=sys.stderr, flush=True)

    scanner = Scanner(config=config, sink=sink if args.progress else None)
    root = scanner.scan(args.path)
    print(root.to_json(indent=args.indent))
    logging.getLogger("diskweight").info(
        "total %s in %.1f s", format_bytes(root.size), scanner.stats.elapsed_sec)
    return 0


if __name__ == "__main__":
    sys.exit(main())
