"""
errors/ - Error Taxonomy

Fatal exceptions raised before any decision is made, and non-fatal
notices collected while computing.
"""

from .taxonomy import (
    AffectedError,
    ConfigValidationError,
    ChangeResolutionError,
    RegistryIntegrityError,
    TaskExecutionError,
    Notice,
    NoticeKind,
    NoticeSeverity,
)

from .aggregator import NoticeCollector

__all__ = [
    # Exceptions
    "AffectedError",
    "ConfigValidationError",
    "ChangeResolutionError",
    "RegistryIntegrityError",
    "TaskExecutionError",
    # Notices
    "Notice",
    "NoticeKind",
    "NoticeSeverity",
    "NoticeCollector",
]
