from __future__ import annotations
import json
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple

METADATA_UNREADABLE = "metadata_unreadable"
DIRECTORY_UNLISTABLE = "directory_unlistable"
SYMLINK_CYCLE = "symlink_cycle"


@dataclass(frozen=True)
class Node:
    """A scanned filesystem entry.

    ``size`` of a directory is the sum of its retained ``children``; entries
    below the scan threshold are neither listed nor counted.
    """
    name: str
    size: int = 0
    children: Tuple["Node", ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "size": self.size,
            "children": [c.to_dict() for c in self.children],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Node":
        return cls(
            name=str(data["name"]),
            size=int(data.get("size", 0)),
            children=tuple(cls.from_dict(c) for c in data.get("children") or ()),
        )

    def to_json(self, indent: Optional[int] = None) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False, indent=indent)

    def iter_all(self) -> Iterator["Node"]:
        yield self
        for child in self.children:
            yield from child.iter_all()

    def find(self, name: str) -> Optional["Node"]:
        for n in self.iter_all():
            if n.name == name:
                return n
        return None


def nodes_to_json(nodes: Sequence[Node]) -> str:
    # progress payload: a flat JSON array of completed subtrees
    return json.dumps([n.to_dict() for n in nodes], ensure_ascii=False)


def nodes_from_json(payload: str) -> List[Node]:
    return [Node.from_dict(d) for d in json.loads(payload)]


@dataclass
class ScanIssue:
    kind: str
    path: str
    message: str = ""


@dataclass
class ScanStats:
    files: int = 0
    dirs: int = 0
    dropped: int = 0
    emissions: int = 0
    issues: List[ScanIssue] = field(default_factory=list)
    cancelled: bool = False
    elapsed_sec: float = 0.0

    def issues_of(self, kind: str) -> List[ScanIssue]:
        return [i for i in self.issues if i.kind == kind]

