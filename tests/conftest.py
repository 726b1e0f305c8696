"""
Test Configuration and Fixtures

Provides a small multi-module build used across the suites:

    core <- util <- app
    core <- api  <- app
    docs (standalone), root module at "."
"""

import json

import pytest

from affected.bootstrap.config import AffectedConfig
from affected.core.models import Module
from affected.core.registry import ModuleRegistry


ENV_VARS = [
    "AFFECTED_TARGET", "AFFECTED_ALWAYS_RUN", "AFFECTED_NEVER_RUN", "AFFECTED_PROJECTS",
    "AFFECTED_AFFECTS_ALL", "AFFECTED_IGNORED", "AFFECTED_MODE", "AFFECTED_DEBUG",
    "AFFECTED_RUN", "AFFECTED_COMMIT", "AFFECTED_PREV_COMMIT", "AFFECTED_COMPARE_MODE",
    "AFFECTED_ALL", "AFFECTED_RUN_COMMAND_LINE", "AFFECTED_COMMAND_LINE_ARGS",
    "AFFECTED_LOG_LEVEL", "AFFECTED_LOG_FORMAT", "AFFECTED_LOG_FILE", "AFFECTED_JSON_LOGS",
]


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Keep AFFECTED_* variables of the calling shell out of the tests."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def two_module_registry():
    """A(moduleA) and B(moduleB) where B depends on A."""
    return ModuleRegistry([
        Module("A", "moduleA"),
        Module("B", "moduleB", frozenset({"A"})),
    ])


@pytest.fixture
def project_modules():
    return [
        Module(":", ""),
        Module(":core", "libs/core"),
        Module(":util", "libs/util", frozenset({":core"})),
        Module(":api", "services/api", frozenset({":core"})),
        Module(":app", "services/app", frozenset({":util", ":api"})),
        Module(":docs", "docs"),
    ]


@pytest.fixture
def project_registry(project_modules):
    return ModuleRegistry(project_modules)


@pytest.fixture
def config():
    """Minimal valid configuration."""
    return AffectedConfig(target_task_name="test")


@pytest.fixture
def registry_file(tmp_path, project_registry):
    path = tmp_path / "affected-modules.json"
    path.write_text(json.dumps(project_registry.to_dict()))
    return path
