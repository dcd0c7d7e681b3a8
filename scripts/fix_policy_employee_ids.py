"""
Rewrite internal employee record ids in custom policy employee_ids to
canonical employee codes (e.g. 6982c7cca0ceeb38da48ba58 -> EMP-7884).

Usage (from the project root, with .env loaded):

    python scripts/fix_policy_employee_ids.py --company <id>             # dry run
    python scripts/fix_policy_employee_ids.py --company <id> --confirm

Safe to run multiple times (idempotent). Policies with entries that resolve
to no employee are reported and left untouched.
"""
import argparse
import sys
from pathlib import Path

# Ensure leave_engine package is importable when script is run directly
ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from leave_engine.core.logging import setup_logging
from leave_engine.db.session import SharedSessionLocal, init_shared_db, shared_engine
from leave_engine.services.repair_service import fix_policy_employee_ids
from leave_engine.services.tenant_store import TenantStoreLocator


def main() -> None:
    parser = argparse.ArgumentParser(description="Normalize custom policy employee_ids to canonical codes")
    parser.add_argument("--company", required=True, help="Company id")
    parser.add_argument("--confirm", action="store_true", help="Write changes (default is a dry run)")
    parser.add_argument("--verbose", action="store_true", help="Log at DEBUG")
    args = parser.parse_args()

    setup_logging("DEBUG" if args.verbose else None)
    init_shared_db(shared_engine)
    locator = TenantStoreLocator(SharedSessionLocal)
    try:
        result = fix_policy_employee_ids(locator.resolve_store(args.company), confirm=args.confirm)
    finally:
        locator.dispose()

    for line in result.details:
        print(f"  {line}")
    print(
        f"Policies needing repair: before={result.before_count} after={result.after_count} "
        f"(fixed={result.fixed}, already correct={result.already_correct}, unfixable={result.unfixable})"
    )
    if result.dry_run:
        print("Dry run: nothing written. Re-run with --confirm to apply.")
    else:
        print("Done.")


if __name__ == "__main__":
    main()
