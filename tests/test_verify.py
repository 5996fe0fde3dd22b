# Tests for usermigrate.migrate.verify
# Checksum comparison phase

from unittest.mock import patch

import pytest

from usermigrate.errors import VerifyFailed
from usermigrate.migrate.category import Category
from usermigrate.migrate.verify import Verifier, VerifyOutcome, VerifyVerdict, is_difference
from usermigrate.mirror.native import NativeMirror


class TestIsDifference:
    """Tests for is_difference."""

    @pytest.mark.parametrize(
        "line",
        [
            ">f+++++++++ a.txt",
            ">fc........ a.txt",
            "cd+++++++++ sub/",
            "cL+++++++++ link -> a.txt",
            "*deleting   extra.txt",
        ],
    )
    def test_differences(self, line):
        assert is_difference(line)

    @pytest.mark.parametrize(
        "line",
        [
            ".d..t...... ./",
            ".f...p..... a.txt",
            "hf+++++++++ b.txt => a.txt",
            "sending incremental file list",
            "",
        ],
    )
    def test_not_differences(self, line):
        assert not is_difference(line)


class TestVerifyVerdict:
    """Tests for VerifyVerdict."""

    def test_passed(self):
        verdict = VerifyVerdict([VerifyOutcome(Category.DESKTOP, False)])
        assert verdict.passed
        verdict.raise_for_status()

    def test_failed(self, temp_dir):
        report = temp_dir / "verify_Music.txt"
        verdict = VerifyVerdict(
            [
                VerifyOutcome(Category.DESKTOP, False),
                VerifyOutcome(Category.MUSIC, True, report_path=report),
            ]
        )
        with pytest.raises(VerifyFailed) as exc_info:
            verdict.raise_for_status()
        assert exc_info.value.categories == ["Music"]
        assert exc_info.value.reports == [report]
        assert exc_info.value.exit_code == 6


class TestVerifier:
    """Tests for Verifier."""

    def test_one_differing_category(self, source_home, dest_home, make_tree, run_log, temp_dir):
        make_tree(source_home, {"Desktop/a.txt": "a", "Music/song.mp3": "la la"})
        mirror = NativeMirror()
        for category in (Category.DESKTOP, Category.MUSIC):
            mirror.copy_tree(
                category.path_in(source_home),
                category.path_in(dest_home),
                [],
                dry_run=False,
                emit=lambda line: None,
            )
        (dest_home / "Music" / "song.mp3").unlink()

        reports = temp_dir / "reports"
        verdict = Verifier(mirror, run_log, reports).verify(source_home, dest_home, [])

        assert [o.category for o in verdict.outcomes] == [Category.DESKTOP, Category.MUSIC]
        assert [o.category for o in verdict.differing] == [Category.MUSIC]
        assert len(list(reports.glob("verify_*.txt"))) == 2
        music = verdict.outcomes[1]
        assert ">f+++++++++ song.mp3" in music.report_path.read_text(encoding="utf-8")

    def test_skips_categories_missing_at_source(self, source_home, dest_home, run_log, temp_dir):
        (source_home / "Documents").mkdir()
        (dest_home / "Documents").mkdir()
        verdict = Verifier(NativeMirror(), run_log, temp_dir / "reports").verify(source_home, dest_home, [])
        assert [o.category for o in verdict.outcomes] == [Category.DOCUMENTS]

    def test_missing_destination_folder_differs(self, source_home, dest_home, make_tree, run_log, temp_dir):
        make_tree(source_home, {"Pictures/cat.jpg": "meow"})
        verdict = Verifier(NativeMirror(), run_log, temp_dir / "reports").verify(source_home, dest_home, [])
        assert not verdict.passed

    def test_nonzero_exit_counts_as_difference(self, source_home, dest_home, run_log, temp_dir):
        class BrokenMirror:
            name = "broken"

            def compare_tree(self, source, destination, rules, *, emit, report_extraneous=False):
                emit("rsync: opendir failed: Permission denied (13)")
                return 23

        (source_home / "Desktop").mkdir()
        outcome = Verifier(BrokenMirror(), run_log, temp_dir / "reports").verify_category(
            Category.DESKTOP, source_home, dest_home, []
        )

        assert outcome.differences_found
        assert outcome.differences == []
        assert outcome.returncode == 23

    def test_reports_in_same_second_are_kept_apart(self, source_home, dest_home, make_tree, run_log, temp_dir):
        make_tree(source_home, {"Desktop/a.txt": "a"})
        verifier = Verifier(NativeMirror(), run_log, temp_dir / "reports")

        with patch("usermigrate.migrate.verify.timestamp", return_value="20260101_120000"):
            first = verifier.verify_category(Category.DESKTOP, source_home, dest_home, [])
            make_tree(dest_home, {"Desktop/a.txt": "a"})
            second = verifier.verify_category(Category.DESKTOP, source_home, dest_home, [])

        assert first.report_path.name == "verify_Desktop_20260101_120000.txt"
        assert second.report_path.name == "verify_Desktop_20260101_120000_2.txt"
        assert ">f+++++++++ a.txt" in first.report_path.read_text(encoding="utf-8")
        assert first.differences_found
        assert not second.differences_found
