"""
Account balance endpoints
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from .auth import BankingSystem, get_banking_system, get_request_context
from ..banking import RequestContext


router = APIRouter()


@router.get("/balance")
async def get_balance(
    account: Optional[str] = Query(default="checking"),
    ctx: RequestContext = Depends(get_request_context),
    system: BankingSystem = Depends(get_banking_system)
):
    """Balance of one of the caller's accounts"""
    return system.banking.get_balance(ctx, account)
