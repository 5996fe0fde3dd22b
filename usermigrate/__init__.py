"""usermigrate - one-shot migration of personal data between local user accounts.

Copies Desktop, Documents, Downloads, Pictures, Movies and Music from one
account's home directory to another's, fixes ownership and optionally
verifies the result with a checksum comparison pass.
"""

__version__ = "1.1.1"
__author__ = "usermigrate contributors"

__all__ = [
    "__version__",
    "Category",
    "CATALOG",
    "MigrationEngine",
    "MigrationRequest",
    "MigrationResult",
    "MigrationError",
    "load_exclusions",
]


def __getattr__(name: str):
    """Lazy import to avoid loading dependencies during setup."""
    if name in ("Category", "CATALOG"):
        from usermigrate.migrate import category

        return getattr(category, name)
    if name in ("MigrationEngine", "MigrationRequest", "MigrationResult"):
        from usermigrate.migrate import engine

        return getattr(engine, name)
    if name == "MigrationError":
        from usermigrate.errors import MigrationError

        return MigrationError
    if name == "load_exclusions":
        from usermigrate.migrate.excludes import load_exclusions

        return load_exclusions
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
