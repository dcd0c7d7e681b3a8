"""
Consistency audit across tenants.

Reports tenant-scoped rows found in the shared store, custom policy
employee_ids entries that do not resolve (or resolve only through an internal
record id), and employees matched by more than one active policy.

Usage (from the project root, with .env loaded):

    python scripts/audit_tenants.py
    python scripts/audit_tenants.py --company 6982c7cca0ceeb38da48ba01 --strict

Read-only. With --strict the exit code is 1 when any defect is found.
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
from leave_engine.services.audit_service import audit_tenant, count_misplaced_documents
from leave_engine.services.tenant_service import list_tenants
from leave_engine.services.tenant_store import TenantStoreLocator


def main() -> int:
    parser = argparse.ArgumentParser(description="Audit tenant data consistency")
    parser.add_argument("--company", help="Audit a single company id (default: all active)")
    parser.add_argument("--strict", action="store_true", help="Exit 1 when any defect is found")
    parser.add_argument("--verbose", action="store_true", help="Log at DEBUG")
    args = parser.parse_args()

    setup_logging("DEBUG" if args.verbose else None)
    init_shared_db(shared_engine)
    locator = TenantStoreLocator(SharedSessionLocal)

    db = SharedSessionLocal()
    try:
        company_ids = [args.company] if args.company else [c.id for c in list_tenants(db)]
    finally:
        db.close()

    print(f"Misplaced documents in shared store: {count_misplaced_documents(shared_engine)}")
    defects = 0
    try:
        for company_id in company_ids:
            report = audit_tenant(locator.resolve_store(company_id), shared_engine)
            status = "clean" if report.is_clean else "DEFECTS"
            print(f"\nCompany {company_id}: {status}")
            for doc in report.misplaced_documents:
                print(f"  misplaced: {doc.table} {doc.record_id} (company_id={doc.company_id})")
            for ref in report.unresolved_policy_references:
                print(f"  unresolved: policy {ref.policy_id} ({ref.policy_name}) -> {ref.employee_ref}")
            for ref in report.non_canonical_policy_references:
                print(f"  non-canonical: policy {ref.policy_id} lists {ref.employee_ref} (= {ref.employee_code})")
            for finding in report.ambiguous_policies:
                print(
                    f"  ambiguous: {finding.employee_code} / leave type {finding.leave_type_id}: "
                    f"{', '.join(finding.policy_ids)}"
                )
            if not report.is_clean:
                defects += 1
    finally:
        locator.dispose()

    print(f"\nAudited {len(company_ids)} companies, {defects} with defects.")
    return 1 if args.strict and defects else 0


if __name__ == "__main__":
    sys.exit(main())
