# usermigrate Test Fixtures
# Pytest fixtures for usermigrate tests

import tempfile
from collections.abc import Generator
from pathlib import Path
from types import SimpleNamespace

import pytest
from rich.console import Console

from usermigrate.config.schema import MigrateConfig
from usermigrate.logger import RunLog


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def temp_home(temp_dir: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Create a temporary home directory."""
    home = temp_dir / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.delenv("USERMIGRATE_CONFIG", raising=False)
    return home


@pytest.fixture
def homes_root(temp_dir: Path) -> Path:
    """Directory playing the role of /Users or /home."""
    root = temp_dir / "Users"
    root.mkdir()
    return root


@pytest.fixture
def source_home(homes_root: Path) -> Path:
    """Home directory of the old account."""
    home = homes_root / "alice"
    home.mkdir()
    return home


@pytest.fixture
def dest_home(homes_root: Path) -> Path:
    """Home directory of the new account."""
    home = homes_root / "alice2"
    home.mkdir()
    return home


@pytest.fixture
def exclude_file(temp_dir: Path) -> Path:
    """Exclusion file with a couple of common patterns."""
    path = temp_dir / "exclude.txt"
    path.write_text("# test patterns\n.DS_Store\n*.tmp\n", encoding="utf-8")
    return path


@pytest.fixture
def config(homes_root: Path, exclude_file: Path, temp_dir: Path) -> MigrateConfig:
    """Configuration pointing at the temporary homes, using the native mirror."""
    return MigrateConfig.model_validate(
        {
            "homes_root": str(homes_root),
            "exclude_file": str(exclude_file),
            "log_dir": str(temp_dir / "logs"),
            "backend": "native",
            "output": {"verbose": False, "colored": False},
        }
    )


@pytest.fixture
def quiet_console() -> Console:
    """Rich console that writes to an in-memory buffer."""
    return Console(quiet=True)


@pytest.fixture
def run_log(temp_dir: Path, quiet_console: Console) -> Generator[RunLog, None, None]:
    """Open run log in a temporary log directory."""
    log = RunLog.open(temp_dir / "logs", "alice", "alice2", console=quiet_console)
    yield log
    log.close()


@pytest.fixture
def known_accounts():
    """Account lookup that knows alice and alice2 only."""
    accounts = {"alice", "alice2"}

    def lookup(name: str):
        if name not in accounts:
            raise KeyError(name)
        return SimpleNamespace(pw_name=name, pw_gid=20)

    return lookup


@pytest.fixture
def make_tree():
    """Create files (and their parent directories) under a root."""

    def make(root: Path, files: dict[str, str]) -> Path:
        for rel, content in files.items():
            path = root / rel
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding="utf-8")
        return root

    return make
