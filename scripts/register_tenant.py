"""
Onboard a company: registry entry, tenant schema and default leave types.

Usage (from the project root, with .env loaded):

    python scripts/register_tenant.py --name "Acme Corp"
    python scripts/register_tenant.py --name "Acme Corp" --company-id 6982c7cca0ceeb38da48ba01

Safe to run multiple times for the same --company-id.
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
from leave_engine.services.tenant_service import register_tenant
from leave_engine.services.tenant_store import TenantStoreLocator


def main() -> None:
    parser = argparse.ArgumentParser(description="Register a company and create its tenant store")
    parser.add_argument("--name", required=True, help="Company name")
    parser.add_argument("--company-id", help="24-hex company id (generated when omitted)")
    parser.add_argument("--database-url", help="Tenant database URL (default: TENANT_DATABASE_URL_TEMPLATE)")
    args = parser.parse_args()

    setup_logging()
    init_shared_db(shared_engine)
    locator = TenantStoreLocator(SharedSessionLocal)
    db = SharedSessionLocal()
    try:
        store = register_tenant(
            db, locator, args.name, company_id=args.company_id, database_url=args.database_url
        )
        print(f"Company {store.company_id} ready.")
    finally:
        db.close()
        locator.dispose()


if __name__ == "__main__":
    main()
