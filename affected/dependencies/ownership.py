"""
Ownership Mapper

Resolves a changed file to the single module that owns it. The most
specific (longest) module directory that is a path-segment prefix of
the file wins; the root module (directory "") owns anything left over.
"""

from __future__ import annotations
from typing import Dict, Iterable, List, Optional, Set
import logging

from affected.core.models import path_segments
from affected.core.registry import ModuleRegistry
from affected.errors.aggregator import NoticeCollector
from affected.errors.taxonomy import tied_ownership

logger = logging.getLogger(__name__)


class OwnershipMapper:
    """Maps file paths to owning module ids by directory prefix."""

    def __init__(self, registry: ModuleRegistry, notices: Optional[NoticeCollector] = None):
        self._notices = notices if notices is not None else NoticeCollector(logger)

        # directory -> ids claiming it, smallest id first
        self._by_directory: Dict[str, List[str]] = {}
        for module in registry.modules():
            self._by_directory.setdefault(module.directory, []).append(module.id)
        for ids in self._by_directory.values():
            ids.sort()

    def owner_of(self, file_path: str) -> Optional[str]:
        """
        Get the id of the module owning file_path, or None if unowned.

        Walks the path's prefixes from longest to shortest so the first hit
        is the most specific directory.
        """
        segments = path_segments(file_path)

        for length in range(len(segments), -1, -1):
            directory = "/".join(segments[:length])
            ids = self._by_directory.get(directory)
            if not ids:
                continue
            winner = ids[0]
            if len(ids) > 1:
                self._notices.add(tied_ownership(file_path, winner, ids))
            return winner

        return None

    def owners_of(self, file_paths: Iterable[str]) -> Set[str]:
        """Union of owners of the given files; unowned files contribute nothing."""
        owners = set()
        for path in file_paths:
            owner = self.owner_of(path)
            if owner is not None:
                owners.add(owner)
        return owners

    def ownership_map(self, file_paths: Iterable[str]) -> Dict[str, Optional[str]]:
        """File path -> owner id (or None), preserving input order."""
        return {path: self.owner_of(path) for path in file_paths}
