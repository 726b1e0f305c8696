"""
Dependency & Ownership

Provides:
- OwnershipMapper: changed file -> owning module
- DependencyGraph: module DAG with transitive dependent lookup
"""

from .ownership import OwnershipMapper
from .graph import DependencyGraph

__all__ = [
    "OwnershipMapper",
    "DependencyGraph",
]
