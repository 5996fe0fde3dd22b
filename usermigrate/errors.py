# usermigrate Errors
# Exception taxonomy for migration runs

from __future__ import annotations

from pathlib import Path


class MigrationError(Exception):
    """Base exception for all migration failures.

    Each subclass carries the process exit status the CLI uses for it.
    """

    exit_code: int = 1

    def __init__(self, message: str, returncode: int | None = None):
        self.message = message
        self.returncode = returncode
        super().__init__(message)


class PreconditionError(MigrationError):
    """Raised before any phase starts; no state has been created."""

    exit_code = 2


class ConfigMissing(PreconditionError):
    """Exclusion pattern file (or an explicit config file) does not exist."""

    def __init__(self, path: Path, what: str = "exclude file"):
        self.path = path
        super().__init__(f"Missing {what}: {path}")


class DependencyError(MigrationError):
    """Copy tool is unavailable or unusable."""

    exit_code = 3


class CopyError(MigrationError):
    """Copy of a category exited non-zero; later categories were not attempted."""

    exit_code = 4

    def __init__(self, category: str, returncode: int | None, reason: str | None = None):
        self.category = category
        if reason is None:
            message = f"Copy of {category} failed with exit code {returncode}"
        else:
            message = f"Copy of {category} failed: {reason}"
        super().__init__(message, returncode=returncode)


class OwnershipError(MigrationError):
    """Recursive ownership change failed for one or more destinations.

    Copied data is left in place under the wrong ownership.
    """

    exit_code = 5

    def __init__(self, failed: list[Path], owner: str):
        self.failed = failed
        self.owner = owner
        targets = ", ".join(str(p) for p in failed)
        super().__init__(
            f"Could not change ownership to {owner} for: {targets}\n"
            f"Fix manually: sudo chown -R {owner} <path>"
        )


class VerifyFailed(MigrationError):
    """Verification found differences in at least one category."""

    exit_code = 6

    def __init__(self, categories: list[str], reports: list[Path] | None = None):
        self.categories = categories
        self.reports = reports or []
        super().__init__(f"Verify phase found differences in: {', '.join(categories)}")
