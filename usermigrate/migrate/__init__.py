# usermigrate Migrate Module
# Planning, copy, ownership and verification phases

from usermigrate.migrate.category import CATALOG, Category, present_categories
from usermigrate.migrate.engine import MigrationEngine, MigrationRequest, MigrationResult
from usermigrate.migrate.excludes import ExclusionRule, first_match, load_exclusions, parse_exclusions
from usermigrate.migrate.executor import CopyExecutor, CopyOutcome
from usermigrate.migrate.ownership import OwnershipNormalizer
from usermigrate.migrate.plan import SyncPlan, SyncTask, build_plan
from usermigrate.migrate.preflight import account_exists, check_preconditions
from usermigrate.migrate.verify import Verifier, VerifyOutcome, VerifyVerdict, is_difference

__all__ = [
    # Category
    "Category",
    "CATALOG",
    "present_categories",
    # Exclusions
    "ExclusionRule",
    "parse_exclusions",
    "load_exclusions",
    "first_match",
    # Plan
    "SyncTask",
    "SyncPlan",
    "build_plan",
    # Copy
    "CopyExecutor",
    "CopyOutcome",
    # Ownership
    "OwnershipNormalizer",
    # Verify
    "Verifier",
    "VerifyOutcome",
    "VerifyVerdict",
    "is_difference",
    # Preflight
    "account_exists",
    "check_preconditions",
    # Engine
    "MigrationEngine",
    "MigrationRequest",
    "MigrationResult",
]
