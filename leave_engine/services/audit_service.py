"""
Consistency Auditor - read-only verification pass over a tenant.

Three independent checks:
- misplaced documents: tenant-scoped rows sitting in the shared store
- unresolved policy references: employee_ids entries that name no employee
- ambiguous policies: (employee, leave type) pairs matched by >1 active policy

Findings are aggregated into an AuditReport. Nothing here writes; fixes live
in repair_service and have to be invoked explicitly.
"""
import logging
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from sqlalchemy import inspect, select
from sqlalchemy.engine import Engine

from leave_engine.core.exceptions import (
    AmbiguousPolicyError,
    DanglingReferenceError,
    DataPlacementViolation,
    EmployeeNotFoundError,
)
from leave_engine.db.base import TenantBase
from leave_engine.models.custom_leave_policy import CustomLeavePolicy
from leave_engine.services.identity_service import get_employee_by_code, is_canonical_code, to_canonical_code
from leave_engine.services.tenant_store import TenantStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MisplacedDocument:
    table: str
    record_id: Optional[str]
    company_id: Optional[str]


@dataclass(frozen=True)
class UnresolvedPolicyReference:
    policy_id: str
    policy_name: str
    employee_ref: str


@dataclass(frozen=True)
class NonCanonicalPolicyReference:
    """Entry that only resolves through an internal record id."""

    policy_id: str
    policy_name: str
    employee_ref: str
    employee_code: str


@dataclass(frozen=True)
class AmbiguousPolicyFinding:
    employee_code: str
    leave_type_id: str
    policy_ids: tuple


@dataclass
class AuditReport:
    company_id: str
    misplaced_documents: List[MisplacedDocument] = field(default_factory=list)
    unresolved_policy_references: List[UnresolvedPolicyReference] = field(default_factory=list)
    ambiguous_policies: List[AmbiguousPolicyFinding] = field(default_factory=list)
    non_canonical_policy_references: List[NonCanonicalPolicyReference] = field(default_factory=list)

    @property
    def is_clean(self) -> bool:
        return not (
            self.misplaced_documents
            or self.unresolved_policy_references
            or self.ambiguous_policies
            or self.non_canonical_policy_references
        )

    def raise_for_findings(self) -> None:
        """
        Turn the first finding into its typed error (misplacement first).

        Non-canonical references are reported but not raised: they still
        resolve, and fix_policy_employee_ids rewrites them.
        """
        if self.misplaced_documents:
            doc = self.misplaced_documents[0]
            raise DataPlacementViolation(
                f"{len(self.misplaced_documents)} tenant-scoped document(s) found in the shared store "
                f"(first: {doc.table} {doc.record_id})"
            )
        if self.unresolved_policy_references:
            ref = self.unresolved_policy_references[0]
            raise DanglingReferenceError(ref.policy_id, ref.employee_ref)
        if self.ambiguous_policies:
            finding = self.ambiguous_policies[0]
            raise AmbiguousPolicyError(finding.employee_code, finding.leave_type_id, finding.policy_ids)


def shared_tenant_tables(shared_engine: Engine) -> List[str]:
    """Tenant-scoped table names that exist in the shared store."""
    present = set(inspect(shared_engine).get_table_names())
    return sorted(name for name in TenantBase.metadata.tables if name in present)


def read_shared_rows(shared_engine: Engine, table_name: str) -> List[dict]:
    table = TenantBase.metadata.tables[table_name]
    # Only select columns the stray table actually has
    present = {col["name"] for col in inspect(shared_engine).get_columns(table_name)}
    columns = [col for col in table.columns if col.name in present]
    if not columns:
        return []
    with shared_engine.connect() as conn:
        return [dict(row._mapping) for row in conn.execute(select(*columns))]


def find_misplaced_documents(shared_engine: Engine, company_id: Optional[str] = None) -> List[MisplacedDocument]:
    """
    Tenant-scoped rows in the shared store.

    With company_id, only rows owned by that company or with an empty owner
    (rows without an owner cannot be ruled out for any tenant).
    """
    found: List[MisplacedDocument] = []
    for table_name in shared_tenant_tables(shared_engine):
        for row in read_shared_rows(shared_engine, table_name):
            owner = row.get("company_id")
            if company_id is not None and owner and owner != company_id:
                continue
            found.append(MisplacedDocument(table=table_name, record_id=row.get("id"), company_id=owner))
    return found


def count_misplaced_documents(shared_engine: Engine) -> int:
    """Tenant-scoped rows in the shared store, across all tenants. Must be 0."""
    return len(find_misplaced_documents(shared_engine))


def audit_tenant(store: TenantStore, shared_engine: Engine) -> AuditReport:
    """Run every check for one tenant and return the aggregated report."""
    report = AuditReport(company_id=store.company_id)
    report.misplaced_documents = find_misplaced_documents(shared_engine, store.company_id)

    with store.session() as db:
        policies = (
            db.query(CustomLeavePolicy)
            .filter(CustomLeavePolicy.is_active == True, CustomLeavePolicy.is_deleted.is_not(True))  # noqa: E712
            .order_by(CustomLeavePolicy.id)
            .all()
        )

        # (employee code, leave type id) -> matching policy ids
        matches: Dict[tuple, List[str]] = defaultdict(list)
        for policy in policies:
            for ref in policy.employee_ids or []:
                try:
                    code = to_canonical_code(db, ref)
                except EmployeeNotFoundError:
                    code = None
                if code is None or get_employee_by_code(db, code) is None:
                    report.unresolved_policy_references.append(
                        UnresolvedPolicyReference(policy.id, policy.name, str(ref))
                    )
                    continue
                if not is_canonical_code(ref) or code != ref:
                    report.non_canonical_policy_references.append(
                        NonCanonicalPolicyReference(policy.id, policy.name, str(ref), code)
                    )
                    # The resolver only matches stored canonical codes
                    continue
                key = (code, policy.leave_type_id)
                if policy.id not in matches[key]:
                    matches[key].append(policy.id)

    for (code, leave_type_id), policy_ids in sorted(matches.items()):
        if len(policy_ids) > 1:
            report.ambiguous_policies.append(
                AmbiguousPolicyFinding(code, leave_type_id, tuple(sorted(policy_ids)))
            )

    logger.info(
        "Audit company=%s misplaced=%d unresolved=%d ambiguous=%d non_canonical=%d",
        store.company_id,
        len(report.misplaced_documents),
        len(report.unresolved_policy_references),
        len(report.ambiguous_policies),
        len(report.non_canonical_policy_references),
    )
    if not report.is_clean:
        logger.warning("Audit found consistency defects for company %s", store.company_id)
    return report
