"""
errors/aggregator.py - Collect and report non-fatal notices
"""

from __future__ import annotations
from typing import Dict, Iterable, List, Optional, Tuple
import logging

from .taxonomy import Notice, NoticeKind, NoticeSeverity

logger = logging.getLogger(__name__)


class NoticeCollector:
    """
    Collects notices raised during one computation.

    Every notice is logged when added: integrity warnings at WARNING,
    informational notices (unowned files) at DEBUG.
    Identical notices are recorded once.
    """

    def __init__(self, log: Optional[logging.Logger] = None):
        self._notices: List[Notice] = []
        self._seen = set()
        self._logger = log or logger

    def add(self, notice: Notice) -> None:
        key = (notice.kind, notice.subject, notice.message)
        if key in self._seen:
            return
        self._seen.add(key)
        self._notices.append(notice)

        if notice.severity == NoticeSeverity.WARNING:
            self._logger.warning(notice.message)
        else:
            self._logger.debug(notice.message)

    def extend(self, notices: Iterable[Notice]) -> None:
        for notice in notices:
            self.add(notice)

    def by_kind(self, kind: NoticeKind) -> List[Notice]:
        return [n for n in self._notices if n.kind == kind]

    def count_by_kind(self) -> Dict[str, int]:
        counts: Dict[str, int] = {}
        for notice in self._notices:
            counts[notice.kind.value] = counts.get(notice.kind.value, 0) + 1
        return counts

    def has_warnings(self) -> bool:
        return any(n.severity == NoticeSeverity.WARNING for n in self._notices)

    def freeze(self) -> Tuple[Notice, ...]:
        return tuple(self._notices)

    def __len__(self) -> int:
        return len(self._notices)
