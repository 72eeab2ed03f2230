"""Tests for patch pointer paths."""

import pytest

from graphdelta.core.errors import ErrorCode, PatchError
from graphdelta.patch.pointer import entity_path, escape_token, parse_path, unescape_token


class TestEscaping:
    @pytest.mark.parametrize(
        ("raw", "escaped"),
        [
            ("plain", "plain"),
            ("a/b", "a~1b"),
            ("a~b", "a~0b"),
            ("~/", "~0~1"),
            ("~1", "~01"),
        ],
    )
    def test_escape_and_unescape(self, raw: str, escaped: str) -> None:
        assert escape_token(raw) == escaped
        assert unescape_token(escaped) == raw


class TestEntityPath:
    def test_entity_only(self) -> None:
        assert entity_path("nodes", "x") == "/nodes/x"

    def test_with_segments(self) -> None:
        assert entity_path("edges", "src/a.ts#L1", "data", "0") == "/edges/src~1a.ts#L1/data/0"


class TestParsePath:
    def test_round_trip(self) -> None:
        path = entity_path("nodes", "a/b", "data", "k~ey")
        assert parse_path(path) == ("nodes", "a/b", ("data", "k~ey"))

    def test_entity_without_segments(self) -> None:
        assert parse_path("/edges/e1") == ("edges", "e1", ())

    @pytest.mark.parametrize("path", ["nodes/x", "", "/nodes", "/nodes/", "/widgets/x"])
    def test_malformed_paths_rejected(self, path: str) -> None:
        with pytest.raises(PatchError) as exc_info:
            parse_path(path)
        assert exc_info.value.code == ErrorCode.PATCH_MALFORMED
