"""
Whole-call atomicity for a sequence of collaborator calls.

`atomic()` checkpoints every journaled participant on entry. If the body raises,
all participants are restored (in reverse order) and the exception propagates.
Participants that do not implement `Journaled` are skipped.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Iterable, Iterator, List, Tuple

from .interfaces import Journaled


@contextmanager
def atomic(participants: Iterable[object]) -> Iterator[None]:
    seen: set[int] = set()
    snapshots: List[Tuple[Journaled, Any]] = []
    for p in participants:
        if id(p) in seen or not isinstance(p, Journaled):
            continue
        seen.add(id(p))
        snapshots.append((p, p.checkpoint()))
    try:
        yield
    except BaseException:
        for p, snap in reversed(snapshots):
            p.rollback(snap)
        raise
