"""
Leave balance endpoints (read-only)
"""
from fastapi import APIRouter, Depends

from leave_engine.core.deps import get_tenant_store
from leave_engine.schemas.balance import EmployeeBalancesOut, LeaveBalanceOut
from leave_engine.services.balance_service import resolve_all_balances, resolve_balance
from leave_engine.services.identity_service import to_canonical_code
from leave_engine.services.tenant_store import TenantStore

router = APIRouter()


@router.get(
    "/{company_id}/employees/{employee_ref}/leave-balances",
    response_model=EmployeeBalancesOut,
)
def list_leave_balances(
    company_id: str,
    employee_ref: str,
    store: TenantStore = Depends(get_tenant_store),
):
    """
    Balances for every active leave type.

    employee_ref may be the canonical employee code or the internal record id.
    """
    results = resolve_all_balances(store, employee_ref)
    if results:
        employee_code = results[0].employee_code
    else:
        # No active leave types; still report the resolved code
        with store.session() as db:
            employee_code = to_canonical_code(db, employee_ref)
    return EmployeeBalancesOut(
        company_id=company_id,
        employee_code=employee_code,
        balances=[LeaveBalanceOut.model_validate(r) for r in results],
    )


@router.get(
    "/{company_id}/employees/{employee_ref}/leave-balances/{leave_type_code}",
    response_model=LeaveBalanceOut,
)
def get_leave_balance(
    company_id: str,
    employee_ref: str,
    leave_type_code: str,
    store: TenantStore = Depends(get_tenant_store),
):
    """
    Balance for one leave type.

    404 for unknown company, employee or leave type; 409 when more than one
    active custom policy applies.
    """
    return LeaveBalanceOut.model_validate(resolve_balance(store, employee_ref, leave_type_code))
