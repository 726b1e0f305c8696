"""
Changes

Classification of changed files and the sources that produce them.
"""

from .patterns import PatternClassifier, Classification, compile_patterns
from .sources import ChangeSource, StaticChangeSource, GitChangeSource, git_root

__all__ = [
    "PatternClassifier",
    "Classification",
    "compile_patterns",
    "ChangeSource",
    "StaticChangeSource",
    "GitChangeSource",
    "git_root",
]
