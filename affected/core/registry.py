"""
Module Registry

Static description of every module taking part in a build: identifier,
root directory and declared dependency edges. Supplied by the host and
immutable for the duration of a computation.
"""

from __future__ import annotations
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, List, Optional, Union
import json
import logging

from pydantic import BaseModel, Field, ValidationError
import yaml

from affected.errors.taxonomy import (
    Notice,
    NoticeKind,
    RegistryIntegrityError,
    unknown_dependency,
)
from .models import Module

logger = logging.getLogger(__name__)


def read_document(path: Path) -> Any:
    """Parse a JSON or YAML file, chosen by extension."""
    with open(path) as f:
        if path.suffix in (".yaml", ".yml"):
            return yaml.safe_load(f) or {}
        return json.load(f)


# =============================================================================
# FILE SCHEMA
# =============================================================================

class ModuleEntry(BaseModel):
    """One module as written in a registry file."""
    id: str = Field(..., min_length=1)
    directory: str = ""
    dependencies: List[str] = Field(default_factory=list)


class RegistryDocument(BaseModel):
    """Top level of a registry file."""
    modules: List[ModuleEntry] = Field(default_factory=list)


# =============================================================================
# REGISTRY
# =============================================================================

class ModuleRegistry:
    """
    Read-only collection of modules keyed by id.

    Duplicate ids are fatal; every other inconsistency (shared directory,
    dependency on an unknown module) is reported by validate() and
    handled downstream.
    """

    def __init__(self, modules: Iterable[Module] = ()):
        self._modules: Dict[str, Module] = {}
        for module in modules:
            if not module.id:
                raise RegistryIntegrityError("Module id must not be empty")
            if module.id in self._modules:
                raise RegistryIntegrityError(f"Duplicate module id: {module.id}")
            self._modules[module.id] = module

    @classmethod
    def register_modules(cls, modules: Iterable[Union[Module, Dict[str, Any]]]) -> "ModuleRegistry":
        """Build a registry from Module objects or plain dicts."""
        built = []
        for m in modules:
            if isinstance(m, Module):
                built.append(m)
            else:
                built.append(Module(
                    id=m["id"],
                    directory=m.get("directory", ""),
                    dependencies=frozenset(m.get("dependencies", ())),
                ))
        registry = cls(built)
        logger.debug(f"Registered {len(registry)} modules")
        return registry

    # -------------------------------------------------------------------------
    # Lookup
    # -------------------------------------------------------------------------

    def get(self, module_id: str) -> Optional[Module]:
        return self._modules.get(module_id)

    def ids(self) -> List[str]:
        return sorted(self._modules)

    def modules(self) -> List[Module]:
        return [self._modules[i] for i in self.ids()]

    def __contains__(self, module_id: object) -> bool:
        return module_id in self._modules

    def __iter__(self) -> Iterator[Module]:
        return iter(self.modules())

    def __len__(self) -> int:
        return len(self._modules)

    # -------------------------------------------------------------------------
    # Integrity
    # -------------------------------------------------------------------------

    def validate(self) -> List[Notice]:
        """Report shared directories and edges to unknown modules."""
        notices: List[Notice] = []

        by_directory: Dict[str, List[str]] = {}
        for module in self.modules():
            by_directory.setdefault(module.directory, []).append(module.id)

        for directory, ids in sorted(by_directory.items()):
            if len(ids) > 1:
                notices.append(Notice(
                    kind=NoticeKind.DUPLICATE_DIRECTORY,
                    subject=directory or ".",
                    message=f"Directory '{directory or '.'}' is claimed by {', '.join(ids)}",
                    context={"modules": ids},
                ))

        for module in self.modules():
            for dep in sorted(module.dependencies):
                if dep not in self._modules:
                    notices.append(unknown_dependency(module.id, dep))

        return notices

    # -------------------------------------------------------------------------
    # Serialization
    # -------------------------------------------------------------------------

    def to_dict(self) -> Dict[str, Any]:
        return {"modules": [m.to_dict() for m in self.modules()]}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ModuleRegistry":
        """Load from a parsed registry document (or a bare list of modules)."""
        if isinstance(data, list):
            data = {"modules": data}
        try:
            document = RegistryDocument.model_validate(data)
        except ValidationError as e:
            raise RegistryIntegrityError(f"Invalid registry document: {e}") from e

        return cls(
            Module(id=entry.id, directory=entry.directory, dependencies=frozenset(entry.dependencies))
            for entry in document.modules
        )

    @classmethod
    def from_file(cls, filepath: Union[str, Path]) -> "ModuleRegistry":
        """Load from a JSON or YAML registry file."""
        path = Path(filepath)
        if not path.exists():
            raise RegistryIntegrityError(f"Registry file not found: {filepath}")

        try:
            data = read_document(path)
        except (ValueError, yaml.YAMLError) as e:
            raise RegistryIntegrityError(f"Cannot parse registry file {filepath}: {e}") from e

        registry = cls.from_dict(data)
        logger.info(f"Loaded {len(registry)} modules from {path}")
        return registry
