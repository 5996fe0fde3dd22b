# Tests for usermigrate.utils.paths
# Path helpers and rsync-style exclude matching

import pytest

from usermigrate.utils.paths import ensure_dir, expand_path, glob_to_regex, matches_pattern


class TestExpandPath:
    """Tests for expand_path."""

    def test_expands_tilde(self, temp_home):
        assert expand_path("~/exclude.txt") == temp_home / "exclude.txt"

    def test_expands_env_vars(self, monkeypatch, temp_dir):
        monkeypatch.setenv("MIGRATE_TEST_DIR", str(temp_dir))
        assert expand_path("$MIGRATE_TEST_DIR/x") == temp_dir / "x"

    def test_relative_path_is_kept_relative(self):
        assert not expand_path("exclude.txt").is_absolute()


class TestEnsureDir:
    """Tests for ensure_dir."""

    def test_creates_nested(self, temp_dir):
        target = temp_dir / "a" / "b"
        assert ensure_dir(target) == target
        assert target.is_dir()

    def test_existing_is_fine(self, temp_dir):
        ensure_dir(temp_dir)
        assert temp_dir.is_dir()


class TestGlobToRegex:
    """Tests for glob_to_regex."""

    def test_star_stops_at_slash(self):
        regex = glob_to_regex("*.txt")
        assert regex.match("a.txt")
        assert not regex.match("dir/a.txt")

    def test_double_star_crosses_slash(self):
        assert glob_to_regex("**").match("a/b/c")

    def test_question_mark(self):
        regex = glob_to_regex("a?c")
        assert regex.match("abc")
        assert not regex.match("a/c")
        assert not regex.match("abbc")

    def test_character_class(self):
        assert glob_to_regex("[ab].txt").match("a.txt")
        assert not glob_to_regex("[ab].txt").match("c.txt")

    def test_negated_character_class(self):
        assert glob_to_regex("[!ab].txt").match("c.txt")
        assert not glob_to_regex("[!ab].txt").match("a.txt")

    def test_escaped_wildcard_is_literal(self):
        regex = glob_to_regex("a\\*b")
        assert regex.match("a*b")
        assert not regex.match("axb")

    def test_regex_metacharacters_are_literal(self):
        regex = glob_to_regex("file(1).txt")
        assert regex.match("file(1).txt")
        assert not regex.match("file1.txt")

    def test_whole_string_match(self):
        assert not glob_to_regex("*.tmp").match("notes.tmp.bak")


class TestMatchesPattern:
    """Tests for matches_pattern."""

    @pytest.mark.parametrize(
        "rel_path",
        [".DS_Store", "sub/.DS_Store", "a/b/c/.DS_Store"],
    )
    def test_basename_matches_at_any_depth(self, rel_path):
        assert matches_pattern(rel_path, ".DS_Store")

    def test_wildcard_basename(self):
        assert matches_pattern("notes.tmp", "*.tmp")
        assert matches_pattern("work/notes.tmp", "*.tmp")
        assert not matches_pattern("notes.tmpx", "*.tmp")

    def test_trailing_slash_matches_directories_only(self):
        assert matches_pattern("cache", "cache/", is_dir=True)
        assert not matches_pattern("cache", "cache/", is_dir=False)

    def test_leading_slash_anchors_to_root(self):
        assert matches_pattern("Cache", "/Cache", is_dir=True)
        assert not matches_pattern("sub/Cache", "/Cache", is_dir=True)

    def test_pattern_with_slash_matches_trailing_components(self):
        assert matches_pattern("a/b/c.txt", "b/*.txt")
        assert not matches_pattern("a/bb/c.txt", "b/*.txt")

    def test_double_star_pattern(self):
        assert matches_pattern("x/y/z/file", "x/**/file")
        assert not matches_pattern("x/file2", "x/**/file")

    def test_empty_pattern_never_matches(self):
        assert not matches_pattern("anything", "/")
