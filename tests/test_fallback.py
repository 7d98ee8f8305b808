"""Tests for perch.fallback — template route derivation for dynamic routes."""

import pytest

from perch.fallback import derive_fallback, is_dynamic_segment


class TestIsDynamicSegment:
    @pytest.mark.parametrize("segment", ["[id]", "[...rest]", "[[...slug]]", "post-[id]"])
    def test_bracketed(self, segment: str) -> None:
        assert is_dynamic_segment(segment) is True

    @pytest.mark.parametrize("segment", ["posts", "(tabs)", "[open", "close]", ""])
    def test_literal(self, segment: str) -> None:
        assert is_dynamic_segment(segment) is False


class TestDeriveFallback:
    def test_dynamic_route(self) -> None:
        assert derive_fallback("/posts/1", ["posts", "[id]"]) == "/posts/[id]"

    def test_no_dynamic_segment(self) -> None:
        assert derive_fallback("/posts/1", ["posts", "1"]) is None

    def test_no_segments(self) -> None:
        assert derive_fallback("/posts/1", None) is None
        assert derive_fallback("/posts/1", []) is None

    def test_candidate_equal_to_route(self) -> None:
        assert derive_fallback("/posts/[id]", ["posts", "[id]"]) is None

    def test_groups_are_kept(self) -> None:
        assert derive_fallback("/settings/7", ["(tabs)", "settings", "[id]"]) == (
            "/(tabs)/settings/[id]"
        )

    def test_catch_all(self) -> None:
        assert derive_fallback("/docs/a/b", ["docs", "[...slug]"]) == "/docs/[...slug]"

    def test_tuple_segments(self) -> None:
        assert derive_fallback("/users/9/posts/3", ("users", "[user]", "posts", "[post]")) == (
            "/users/[user]/posts/[post]"
        )
