"""Tests for config/models.py validators and helpers."""

import pytest
from pydantic import ValidationError

from graphdelta.config.constants import MAX_DIFF_DEPTH_LIMIT
from graphdelta.config.models import (
    DiffConfig,
    GraphDeltaConfig,
    PatchConfig,
    parse_transitions,
)


class TestDiffConfig:
    """DiffConfig defaults and validation."""

    def test_defaults(self) -> None:
        config = DiffConfig()
        assert config.ignore_metadata is False
        assert config.semantic_diff is False
        assert config.max_depth == 64
        assert ("component", "function") in config.transition_pairs()

    @pytest.mark.parametrize("depth", [0, -1, MAX_DIFF_DEPTH_LIMIT + 1])
    def test_max_depth_out_of_range_rejected(self, depth: int) -> None:
        with pytest.raises(ValidationError, match="max_depth"):
            DiffConfig(max_depth=depth)

    @pytest.mark.parametrize("item", ["component", "->function", "class-> ", ""])
    def test_malformed_transition_rejected(self, item: str) -> None:
        with pytest.raises(ValidationError, match="old->new"):
            DiffConfig(forbidden_transitions=[item])

    def test_custom_transitions_replace_defaults(self) -> None:
        config = DiffConfig(forbidden_transitions=["service -> job"])
        assert config.transition_pairs() == frozenset({("service", "job")})


class TestPatchConfig:
    def test_defaults(self) -> None:
        config = PatchConfig()
        assert config.created_by == "system"
        assert config.verify_checksum is True
        assert config.strict is False


class TestGraphDeltaConfig:
    def test_sections_present(self) -> None:
        config = GraphDeltaConfig()
        assert config.logging.level == "WARNING"
        assert isinstance(config.diff, DiffConfig)
        assert isinstance(config.patch, PatchConfig)


class TestParseTransitions:
    def test_strips_whitespace(self) -> None:
        assert parse_transitions([" a -> b ", "c->d"]) == frozenset({("a", "b"), ("c", "d")})

    def test_empty(self) -> None:
        assert parse_transitions(()) == frozenset()
