"""
Core enumerations used throughout the affected-set engine.
"""

from enum import Enum


class AffectedMode(str, Enum):
    """
    How far the impact of a change reaches.

    ONLY_DIRECT selects modules owning a changed file.
    INCLUDE_DEPENDENTS also selects every module depending on those,
    directly or transitively.
    """
    ONLY_DIRECT = "ONLY_DIRECT"
    INCLUDE_DEPENDENTS = "INCLUDE_DEPENDENTS"


class ChangeClass(str, Enum):
    """Classification of a single changed file."""
    GLOBAL = "global"        # Matches an affects-all pattern
    IGNORED = "ignored"      # Matches an ignore pattern
    CANDIDATE = "candidate"  # Goes on to ownership mapping


class CompareMode(str, Enum):
    """How two revisions are compared when resolving changed files."""
    COMMIT = "COMMIT"        # git diff <prev> <current>
    TWO_DOT = "TWO_DOT"      # git diff <prev>..<current>
    THREE_DOT = "THREE_DOT"  # git diff <prev>...<current> (since merge base)


class EngineState(str, Enum):
    """
    Phases of one computation.

    Flow: INIT -> VALIDATED -> CLASSIFIED ->
          (GLOBAL_SHORTCUT | GRAPH_EXPANDED) -> FINALIZED
    """
    INIT = "init"
    VALIDATED = "validated"
    CLASSIFIED = "classified"
    GLOBAL_SHORTCUT = "global_shortcut"
    GRAPH_EXPANDED = "graph_expanded"
    FINALIZED = "finalized"


# Separator between module path segments in task paths (":app:test")
MODULE_PATH_SEPARATOR = ":"
