"""Tests for cirun.release.globmatch module."""

from __future__ import annotations

import pytest

from cirun.release.globmatch import compile_glob, glob_match, is_glob

MAINTENANCE = "+([0-9])?(.{+([0-9]),x}).x"


class TestMaintenancePattern:
    @pytest.mark.parametrize("branch", ["5.x", "1.2.x", "12.x", "3.x.x"])
    def test_matches(self, branch: str) -> None:
        assert glob_match(MAINTENANCE, branch)

    @pytest.mark.parametrize("branch", ["555", "release-5.x", "x.x", "5.", "main", "5.x.y"])
    def test_rejects(self, branch: str) -> None:
        assert not glob_match(MAINTENANCE, branch)


class TestBasics:
    def test_plain_name_is_exact(self) -> None:
        assert glob_match("main", "main")
        assert not glob_match("main", "main2")
        assert not glob_match("main", "mai")

    def test_star_stays_in_segment(self) -> None:
        assert glob_match("release/*", "release/1.0")
        assert not glob_match("release/*", "release/1.0/hotfix")
        assert not glob_match("*", "a/b")

    def test_globstar_crosses_segments(self) -> None:
        assert glob_match("release/**", "release/a/b")
        assert glob_match("release/**", "release/1.0")
        assert not glob_match("release/**", "hotfix/a")
        assert glob_match("**", "a/b/c")

    def test_globstar_matches_zero_segments(self) -> None:
        assert glob_match("a/**/b", "a/b")
        assert glob_match("a/**/b", "a/x/y/b")
        assert not glob_match("a/**/b", "a/xb")

    def test_double_star_inside_segment_stays_in_segment(self) -> None:
        assert glob_match("rel**", "release")
        assert not glob_match("rel**", "release/a")

    def test_question_mark(self) -> None:
        assert glob_match("v?", "v1")
        assert not glob_match("v?", "v10")

    def test_escape(self) -> None:
        assert glob_match(r"\*", "*")
        assert not glob_match(r"\*", "a")


class TestClasses:
    def test_range(self) -> None:
        assert glob_match("[a-c]x", "bx")
        assert not glob_match("[a-c]x", "dx")

    @pytest.mark.parametrize("pattern", ["[!0-9]", "[^0-9]"])
    def test_negated(self, pattern: str) -> None:
        assert glob_match(pattern, "a")
        assert not glob_match(pattern, "5")

    def test_posix_class(self) -> None:
        assert glob_match("v[[:digit:]]", "v7")
        assert not glob_match("v[[:digit:]]", "vx")

    def test_unbalanced_bracket_is_literal(self) -> None:
        assert glob_match("[abc", "[abc")


class TestGroups:
    def test_braces(self) -> None:
        assert glob_match("{main,master}", "master")
        assert not glob_match("{main,master}", "mainmaster")

    def test_single_brace_item_is_literal(self) -> None:
        assert glob_match("{main}", "{main}")

    def test_zero_or_one(self) -> None:
        assert glob_match("next?(-major)", "next")
        assert glob_match("next?(-major)", "next-major")
        assert not glob_match("next?(-major)", "next-major-major")

    def test_zero_or_more(self) -> None:
        assert glob_match("a*(b)", "a")
        assert glob_match("a*(b)", "abbb")

    def test_one_or_more(self) -> None:
        assert glob_match("+(ab)", "abab")
        assert not glob_match("+(ab)", "")

    def test_exactly_one(self) -> None:
        assert glob_match("@(alpha|beta)", "beta")
        assert not glob_match("@(alpha|beta)", "alphabeta")

    def test_negation(self) -> None:
        assert glob_match("!(main)", "develop")
        assert not glob_match("!(main)", "main")
        assert glob_match("!(main)", "mainline")

    def test_unclosed_group_is_literal(self) -> None:
        assert glob_match("+(a", "+(a")


def test_is_glob() -> None:
    assert is_glob(MAINTENANCE)
    assert is_glob("release/*")
    assert not is_glob("main")
    assert not is_glob("release-5.x")


def test_compile_glob_is_cached() -> None:
    assert compile_glob("feature/*") is compile_glob("feature/*")
