"""
Audit report schemas
"""
from typing import List, Optional

from pydantic import BaseModel, ConfigDict


class MisplacedDocumentOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    table: str
    record_id: Optional[str] = None
    company_id: Optional[str] = None


class PolicyReferenceOut(BaseModel):
    """A policy employee_ids entry that is unresolved or non-canonical"""
    model_config = ConfigDict(from_attributes=True)

    policy_id: str
    policy_name: str
    employee_ref: str
    employee_code: Optional[str] = None


class AmbiguousPolicyOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    employee_code: str
    leave_type_id: str
    policy_ids: List[str]


class AuditReportOut(BaseModel):
    """Consistency audit of one tenant"""
    model_config = ConfigDict(from_attributes=True)

    company_id: str
    is_clean: bool
    misplaced_documents: List[MisplacedDocumentOut]
    unresolved_policy_references: List[PolicyReferenceOut]
    ambiguous_policies: List[AmbiguousPolicyOut]
    non_canonical_policy_references: List[PolicyReferenceOut]
