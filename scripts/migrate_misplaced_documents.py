"""
Move tenant-scoped rows (leave types, employees, custom policies) that ended
up in the shared store into their company's tenant store.

Usage (from the project root, with .env loaded):

    python scripts/migrate_misplaced_documents.py             # dry run
    python scripts/migrate_misplaced_documents.py --confirm

Safe to run multiple times: rows already present in the tenant store are not
copied twice, and each row is moved in its own transaction.
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
from leave_engine.services.repair_service import migrate_misplaced_documents
from leave_engine.services.tenant_store import TenantStoreLocator


def main() -> None:
    parser = argparse.ArgumentParser(description="Migrate tenant data out of the shared store")
    parser.add_argument("--confirm", action="store_true", help="Write changes (default is a dry run)")
    parser.add_argument("--verbose", action="store_true", help="Log at DEBUG")
    args = parser.parse_args()

    setup_logging("DEBUG" if args.verbose else None)
    init_shared_db(shared_engine)
    locator = TenantStoreLocator(SharedSessionLocal)
    try:
        result = migrate_misplaced_documents(shared_engine, locator, confirm=args.confirm)
    finally:
        locator.dispose()

    for line in result.details:
        print(f"  {line}")
    print(
        f"Misplaced documents: before={result.before_count} after={result.after_count} "
        f"(moved={result.fixed}, unfixable={result.unfixable})"
    )
    if result.dry_run:
        print("Dry run: nothing written. Re-run with --confirm to apply.")
    else:
        print("Done.")


if __name__ == "__main__":
    main()
