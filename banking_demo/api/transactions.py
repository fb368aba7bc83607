"""
Transfer and transaction history endpoints
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from .auth import BankingSystem, get_banking_system, get_request_context
from .schemas import TransferRequest
from ..banking import RequestContext


router = APIRouter()


@router.post("/transfer")
async def transfer(
    request: TransferRequest,
    ctx: RequestContext = Depends(get_request_context),
    system: BankingSystem = Depends(get_banking_system)
):
    """Transfer between two of the caller's accounts"""
    return system.banking.transfer(
        ctx,
        amount=request.amount,
        to_account=request.to_account,
        from_account=request.from_account,
    )


@router.get("/transactions")
async def list_transactions(
    account_type: Optional[str] = Query(default=None, alias="accountType"),
    start_date: Optional[str] = Query(default=None, alias="startDate"),
    end_date: Optional[str] = Query(default=None, alias="endDate"),
    ctx: RequestContext = Depends(get_request_context),
    system: BankingSystem = Depends(get_banking_system)
):
    """The caller's transfer history, newest first"""
    return system.banking.list_transactions(ctx, account_type, start_date, end_date)
