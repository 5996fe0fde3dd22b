# Tests for usermigrate.mirror.rsync
# rsync discovery, argument construction and output streaming

import io
import subprocess
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from usermigrate.errors import DependencyError
from usermigrate.migrate.excludes import parse_exclusions
from usermigrate.mirror.rsync import RsyncMirror, exclude_args, find_rsync

HELP_FULL = """rsync  version 3.2.7  protocol version 31
Options
 --partial-dir=DIR        put a partially transferred file into DIR
 --itemize-changes, -i    output a change-summary for all updates
 --info=FLAGS             fine-grained informational verbosity
 --protect-args, -s       no space-splitting; wildcard chars only
"""

# openrsync / old Apple rsync lacks --partial-dir
HELP_OLD = """openrsync: protocol version 29
 --itemize-changes
"""


def completed(stdout: str, returncode: int = 0) -> subprocess.CompletedProcess:
    return subprocess.CompletedProcess(args=[], returncode=returncode, stdout=stdout, stderr="")


def fake_popen(lines: list[str], returncode: int = 0) -> MagicMock:
    process = MagicMock()
    process.stdout = io.StringIO("".join(line + "\n" for line in lines))
    process.wait.return_value = returncode
    process.__enter__.return_value = process
    return process


@pytest.fixture
def mirror():
    m = RsyncMirror(Path("/usr/bin/rsync"))
    with patch("usermigrate.mirror.rsync.subprocess.run", return_value=completed(HELP_FULL)):
        m.probe()
    return m


class TestFindRsync:
    """Tests for find_rsync."""

    def test_configured_binary(self, temp_dir):
        binary = temp_dir / "rsync"
        binary.write_text("#!/bin/sh\n", encoding="utf-8")
        binary.chmod(0o755)
        assert find_rsync(str(binary)) == binary

    def test_configured_binary_not_executable(self, temp_dir):
        with pytest.raises(DependencyError):
            find_rsync(str(temp_dir / "missing"))

    @patch("usermigrate.mirror.rsync.get_current_platform", return_value="macos")
    @patch("usermigrate.mirror.rsync._is_executable", side_effect=lambda p: p == Path("/opt/homebrew/bin/rsync"))
    def test_prefers_homebrew_on_macos(self, mock_exec, mock_platform):
        assert find_rsync() == Path("/opt/homebrew/bin/rsync")

    @patch("usermigrate.mirror.rsync.get_current_platform", return_value="linux")
    @patch("usermigrate.mirror.rsync.shutil.which", return_value="/usr/bin/rsync")
    def test_path_lookup(self, mock_which, mock_platform):
        assert find_rsync() == Path("/usr/bin/rsync")

    @patch("usermigrate.mirror.rsync.get_current_platform", return_value="linux")
    @patch("usermigrate.mirror.rsync.shutil.which", return_value=None)
    def test_not_found(self, mock_which, mock_platform):
        with pytest.raises(DependencyError) as exc_info:
            find_rsync()
        assert exc_info.value.exit_code == 3


class TestProbe:
    """Tests for RsyncMirror.probe."""

    @patch("usermigrate.mirror.rsync.subprocess.run", return_value=completed(HELP_FULL))
    def test_capabilities(self, mock_run):
        caps = RsyncMirror(Path("/usr/bin/rsync")).probe()
        assert caps.version == "3.2.7"
        assert caps.info_progress
        assert caps.protect_args

    @patch("usermigrate.mirror.rsync.subprocess.run", return_value=completed(HELP_OLD))
    def test_missing_required_option(self, mock_run):
        with pytest.raises(DependencyError) as exc_info:
            RsyncMirror(Path("/usr/bin/rsync")).probe()
        assert "--partial-dir" in exc_info.value.message

    @patch("usermigrate.mirror.rsync.subprocess.run", side_effect=FileNotFoundError("gone"))
    def test_cannot_run(self, mock_run):
        with pytest.raises(DependencyError):
            RsyncMirror(Path("/nope/rsync")).probe()

    def test_describe(self, mirror):
        assert mirror.describe() == "/usr/bin/rsync (rsync 3.2.7)"


class TestArguments:
    """Tests for command line construction."""

    def test_exclude_args_keep_order(self):
        rules = parse_exclusions("b\na\n")
        assert exclude_args(rules) == ["--exclude", "b", "--exclude", "a"]

    def test_copy_args(self, mirror):
        args = mirror.copy_args(Path("/Users/a/Music"), Path("/Users/b/Music"), parse_exclusions("*.tmp\n"))
        assert args[:3] == ["/usr/bin/rsync", "-aEH", "--stats"]
        assert "--info=progress2" in args
        assert "--protect-args" in args
        assert "--partial" in args
        assert "--partial-dir=.rsync-partial" in args
        assert "--dry-run" not in args
        assert args[-4:] == ["--exclude", "*.tmp", "/Users/a/Music/", "/Users/b/Music/"]

    def test_copy_args_dry_run(self, mirror):
        args = mirror.copy_args(Path("/s"), Path("/d"), [], dry_run=True)
        assert "--dry-run" in args

    def test_copy_args_extra(self):
        m = RsyncMirror(Path("/usr/bin/rsync"), extra_args=["--bwlimit=1000"])
        with patch("usermigrate.mirror.rsync.subprocess.run", return_value=completed(HELP_FULL)):
            args = m.copy_args(Path("/s"), Path("/d"), [])
        assert "--bwlimit=1000" in args

    def test_old_rsync_uses_progress(self):
        help_text = "rsync version 2.6.9\n --partial-dir=DIR\n --itemize-changes\n"
        m = RsyncMirror(Path("/usr/bin/rsync"))
        with patch("usermigrate.mirror.rsync.subprocess.run", return_value=completed(help_text)):
            args = m.copy_args(Path("/s"), Path("/d"), [])
        assert "--progress" in args
        assert "--protect-args" not in args

    def test_compare_args(self, mirror):
        args = mirror.compare_args(Path("/s"), Path("/d"), parse_exclusions(".DS_Store\n"))
        assert args == [
            "/usr/bin/rsync",
            "-aEHcni",
            "--itemize-changes",
            "--exclude",
            ".DS_Store",
            "/s/",
            "/d/",
        ]

    def test_compare_args_extraneous(self, mirror):
        args = mirror.compare_args(Path("/s"), Path("/d"), [], report_extraneous=True)
        assert "--delete" in args


class TestStreaming:
    """Tests for copy_tree / compare_tree output streaming."""

    def test_copy_streams_lines_and_returns_status(self, mirror):
        lines = []
        process = fake_popen(["sending incremental file list", ">f+++++++++ a.txt"], returncode=0)
        with patch("usermigrate.mirror.rsync.subprocess.Popen", return_value=process) as mock_popen:
            rc = mirror.copy_tree(Path("/s"), Path("/d"), [], dry_run=False, emit=lines.append)

        assert rc == 0
        assert lines == ["sending incremental file list", ">f+++++++++ a.txt"]
        kwargs = mock_popen.call_args.kwargs
        assert kwargs["stderr"] == subprocess.STDOUT
        assert kwargs["text"] is True

    def test_nonzero_exit_is_returned(self, mirror):
        process = fake_popen(["rsync error: some files could not be transferred (code 23)"], returncode=23)
        with patch("usermigrate.mirror.rsync.subprocess.Popen", return_value=process):
            rc = mirror.compare_tree(Path("/s"), Path("/d"), [], emit=lambda line: None)
        assert rc == 23

    def test_launch_failure(self, mirror):
        with patch("usermigrate.mirror.rsync.subprocess.Popen", side_effect=PermissionError("denied")):
            with pytest.raises(DependencyError):
                mirror.copy_tree(Path("/s"), Path("/d"), [], dry_run=False, emit=lambda line: None)
