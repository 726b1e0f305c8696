"""
Unit tests for engine/validation.py
"""

import pytest

from affected.bootstrap.config import AffectedConfig
from affected.core.enums import AffectedMode
from affected.engine.validation import parse_mode, validate_config, validate_target_task
from affected.errors.taxonomy import ConfigValidationError


class TestTargetTask:
    """Target task name rules."""

    def test_missing(self):
        with pytest.raises(ConfigValidationError, match="required"):
            validate_target_task(None)

    def test_blank(self):
        with pytest.raises(ConfigValidationError, match="required"):
            validate_target_task("   ")

    def test_leading_separator(self):
        with pytest.raises(ConfigValidationError, match="should not start with"):
            validate_target_task(":test")

    def test_valid(self):
        assert validate_target_task(" test ") == "test"


class TestParseMode:
    """Mode parsing."""

    def test_enum_passthrough(self):
        assert parse_mode(AffectedMode.ONLY_DIRECT) == AffectedMode.ONLY_DIRECT

    def test_none_defaults_to_dependents(self):
        assert parse_mode(None) == AffectedMode.INCLUDE_DEPENDENTS

    def test_case_insensitive(self):
        assert parse_mode("only_direct") == AffectedMode.ONLY_DIRECT

    def test_alias(self):
        assert parse_mode("ONLY_DIRECTLY") == AffectedMode.ONLY_DIRECT

    def test_unknown(self):
        with pytest.raises(ConfigValidationError, match="mode must be either") as exc:
            parse_mode("SOMETIMES")
        assert exc.value.option == "mode"


class TestValidateConfig:
    """Whole configuration validation."""

    def test_none_config(self):
        with pytest.raises(ConfigValidationError):
            validate_config(None)

    def test_valid_config(self):
        validated = validate_config(AffectedConfig(
            target_task_name="test",
            mode="ONLY_DIRECT",
            never_run={":a"},
            ignored_patterns=[r"\.md$"],
        ))
        assert validated.target_task_name == "test"
        assert validated.mode == AffectedMode.ONLY_DIRECT
        assert validated.never_run == frozenset({":a"})
        assert validated.classifier.ignored_patterns == [r"\.md$"]

    def test_bad_pattern_fails_validation(self):
        with pytest.raises(ConfigValidationError):
            validate_config(AffectedConfig(target_task_name="test", affects_all_patterns=["[a-"]))
