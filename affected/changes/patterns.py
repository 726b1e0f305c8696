"""
Pattern Classifier

Evaluates each changed file against the affects-all and ignore pattern
sets. First match wins, and affects-all is checked first so an ignore
rule can never hide a change that must trigger a full rebuild.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Iterable, List, Tuple, Union
import re

from affected.core.enums import ChangeClass
from affected.core.models import ChangeSet
from affected.errors.taxonomy import ConfigValidationError


PatternLike = Union[str, "re.Pattern"]


def compile_patterns(patterns: Iterable[PatternLike], option: str) -> Tuple[re.Pattern, ...]:
    """Compile patterns, rejecting invalid expressions up front."""
    compiled = []
    for p in patterns or ():
        if isinstance(p, re.Pattern):
            compiled.append(p)
            continue
        try:
            compiled.append(re.compile(p))
        except re.error as e:
            raise ConfigValidationError(
                f"{option}: invalid regular expression {p!r}: {e}", option=option
            ) from e
    return tuple(sorted(compiled, key=lambda c: c.pattern))


@dataclass(frozen=True)
class Classification:
    """Result of classifying a whole change set."""

    global_files: Tuple[str, ...] = ()
    ignored_files: Tuple[str, ...] = ()
    candidate_files: Tuple[str, ...] = ()
    all_changed: bool = False

    @property
    def is_global(self) -> bool:
        return self.all_changed or bool(self.global_files)


class PatternClassifier:
    """Classifies file paths as GLOBAL, IGNORED or CANDIDATE."""

    def __init__(
        self,
        affects_all: Iterable[PatternLike] = (),
        ignored: Iterable[PatternLike] = (),
    ):
        self._affects_all = compile_patterns(affects_all, "affects_all_patterns")
        self._ignored = compile_patterns(ignored, "ignored_patterns")

    @property
    def affects_all_patterns(self) -> List[str]:
        return [p.pattern for p in self._affects_all]

    @property
    def ignored_patterns(self) -> List[str]:
        return [p.pattern for p in self._ignored]

    def classify(self, file_path: str) -> ChangeClass:
        if any(p.search(file_path) for p in self._affects_all):
            return ChangeClass.GLOBAL
        if any(p.search(file_path) for p in self._ignored):
            return ChangeClass.IGNORED
        return ChangeClass.CANDIDATE

    def classify_all(self, change_set: ChangeSet) -> Classification:
        """
        Classify every file of a change set.

        Every file is classified even after a GLOBAL hit so the debug view
        shows all files that forced the full rebuild.
        """
        if change_set.is_all_changed:
            return Classification(all_changed=True)

        buckets = {
            ChangeClass.GLOBAL: [],
            ChangeClass.IGNORED: [],
            ChangeClass.CANDIDATE: [],
        }
        for path in change_set:
            buckets[self.classify(path)].append(path)

        return Classification(
            global_files=tuple(buckets[ChangeClass.GLOBAL]),
            ignored_files=tuple(buckets[ChangeClass.IGNORED]),
            candidate_files=tuple(buckets[ChangeClass.CANDIDATE]),
        )
