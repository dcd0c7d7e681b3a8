"""
Repair operations for defects the auditor reports.

Both repairs are dry runs unless confirm=True. Each document is fixed in its
own transaction and re-running on a correct document is a no-op, so an
interrupted run can simply be started again.
"""
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import delete, insert, select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from leave_engine.core.exceptions import AmbiguousPolicyError, EmployeeNotFoundError, LeaveEngineError
from leave_engine.db.base import TenantBase
from leave_engine.models.custom_leave_policy import CustomLeavePolicy
from leave_engine.services.audit_service import count_misplaced_documents, read_shared_rows, shared_tenant_tables
from leave_engine.services.custom_policy_service import check_no_overlap
from leave_engine.services.identity_service import get_employee_by_code, to_canonical_code
from leave_engine.services.tenant_store import TenantStore, TenantStoreLocator

logger = logging.getLogger(__name__)


@dataclass
class RepairResult:
    fixed: int = 0
    already_correct: int = 0
    unfixable: int = 0
    before_count: int = 0
    after_count: int = 0
    dry_run: bool = True
    details: List[str] = field(default_factory=list)


def _canonical_ids(db, employee_ids) -> Optional[List[str]]:
    """Canonical, de-duplicated codes in input order; None if any entry is dangling."""
    codes: List[str] = []
    for ref in employee_ids or []:
        try:
            code = to_canonical_code(db, ref)
        except EmployeeNotFoundError:
            return None
        if get_employee_by_code(db, code) is None:
            return None
        if code not in codes:
            codes.append(code)
    return codes


def _pending_rewrite(db, policy) -> bool:
    current = list(policy.employee_ids or [])
    canonical = _canonical_ids(db, current)
    return canonical is not None and canonical != current


def _count_pending_rewrites(store: TenantStore) -> int:
    with store.session() as db:
        return sum(1 for policy in db.query(CustomLeavePolicy).all() if _pending_rewrite(db, policy))


def fix_policy_employee_ids(store: TenantStore, confirm: bool = False) -> RepairResult:
    """
    Rewrite internal record ids in custom policy employee_ids to canonical codes.

    A policy is unfixable, and left untouched, when an entry resolves to no
    employee, when the rewrite would give an employee a second live policy
    for the same leave type, or when its commit fails. before_count and
    after_count are the number of policies needing a rewrite before and
    after the run.
    """
    result = RepairResult(dry_run=not confirm)
    result.before_count = _count_pending_rewrites(store)

    with store.session() as db:
        policy_ids = [pid for (pid,) in db.query(CustomLeavePolicy.id).order_by(CustomLeavePolicy.id).all()]

    for policy_id in policy_ids:
        # One transaction per policy
        with store.session() as db:
            policy = db.query(CustomLeavePolicy).filter(CustomLeavePolicy.id == policy_id).first()
            if policy is None:
                continue
            current = list(policy.employee_ids or [])
            canonical = _canonical_ids(db, current)

            if canonical is None:
                result.unfixable += 1
                result.details.append(f"{policy.id} ({policy.name}): unresolvable entry in {current}")
                logger.warning("Policy %s has employee_ids that do not resolve: %s", policy.id, current)
                continue
            if canonical == current:
                result.already_correct += 1
                continue

            if policy.is_active and not policy.is_deleted:
                try:
                    check_no_overlap(db, policy.leave_type_id, canonical, exclude_policy_id=policy.id)
                except AmbiguousPolicyError as exc:
                    result.unfixable += 1
                    result.details.append(f"{policy.id} ({policy.name}): {exc.message}")
                    logger.warning("Policy %s not rewritten: %s", policy.id, exc.message)
                    continue

            result.details.append(f"{policy.id} ({policy.name}): {current} -> {canonical}")
            if not confirm:
                continue

            # Reassign so the JSON column is flagged dirty
            policy.employee_ids = canonical
            policy.updated_at = datetime.now(timezone.utc)
            try:
                db.commit()
            except SQLAlchemyError as exc:
                db.rollback()
                result.unfixable += 1
                result.details.append(f"{policy_id}: commit failed: {exc}")
                logger.error("Policy %s rewrite failed: %s", policy_id, exc)
                continue
            result.fixed += 1
            logger.info("Policy %s employee_ids rewritten to %s", policy_id, canonical)

    result.after_count = _count_pending_rewrites(store)
    logger.info(
        "fix_policy_employee_ids company=%s dry_run=%s before=%d after=%d fixed=%d already_correct=%d unfixable=%d",
        store.company_id, result.dry_run, result.before_count, result.after_count,
        result.fixed, result.already_correct, result.unfixable,
    )
    return result


def migrate_misplaced_documents(
    shared_engine: Engine,
    locator: TenantStoreLocator,
    confirm: bool = False,
) -> RepairResult:
    """
    Move tenant-scoped rows out of the shared store into their tenant stores.

    A row is copied unless its id already exists in the tenant store, then
    deleted from the shared store. Rows whose company_id is missing or not
    registered, or whose copy fails (e.g. a unique key already taken in the
    tenant store), are unfixable and stay where they are.
    """
    result = RepairResult(dry_run=not confirm)
    result.before_count = count_misplaced_documents(shared_engine)

    # Parents before children so foreign keys hold in the tenant store
    ordered = [t.name for t in TenantBase.metadata.sorted_tables]
    present = set(shared_tenant_tables(shared_engine))

    for table_name in [name for name in ordered if name in present]:
        table = TenantBase.metadata.tables[table_name]
        for row in read_shared_rows(shared_engine, table_name):
            record_id = row.get("id")
            company_id = row.get("company_id")
            label = f"{table_name} {record_id}"
            if not company_id:
                result.unfixable += 1
                result.details.append(f"{label}: no company_id")
                continue
            try:
                store = locator.resolve_store(company_id)
            except LeaveEngineError as exc:
                result.unfixable += 1
                result.details.append(f"{label}: {exc.message}")
                logger.warning("Cannot migrate %s: %s", label, exc.message)
                continue

            result.details.append(f"{label} -> company {company_id}")
            if not confirm:
                continue

            try:
                store.create_schema()
                with store.engine.begin() as conn:
                    exists = conn.execute(select(table.c.id).where(table.c.id == record_id)).first()
                    if exists is None:
                        conn.execute(insert(table).values(**row))
                # Only delete once the copy is committed
                with shared_engine.begin() as conn:
                    conn.execute(delete(table).where(table.c.id == record_id))
            except SQLAlchemyError as exc:
                result.unfixable += 1
                result.details.append(f"{label}: {getattr(exc, 'orig', None) or exc}")
                logger.error("Failed to migrate %s to company %s: %s", label, company_id, exc)
                continue
            result.fixed += 1
            logger.info("Migrated %s to company %s", label, company_id)

    result.after_count = count_misplaced_documents(shared_engine)
    logger.info(
        "migrate_misplaced_documents dry_run=%s before=%d after=%d fixed=%d unfixable=%d",
        result.dry_run, result.before_count, result.after_count, result.fixed, result.unfixable,
    )
    return result
