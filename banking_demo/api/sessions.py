"""
Login and logout endpoints
"""

from fastapi import APIRouter, Depends

from .auth import BankingSystem, get_anonymous_context, get_banking_system, get_request_context
from .schemas import LoginRequest
from ..banking import RequestContext


router = APIRouter()


@router.post("/login")
async def login(
    request: LoginRequest,
    ctx: RequestContext = Depends(get_anonymous_context),
    system: BankingSystem = Depends(get_banking_system)
):
    """Open a session; the returned sessionId goes in the X-Session-Id header"""
    return system.banking.login(ctx, request.username, request.password)


@router.post("/logout")
async def logout(
    ctx: RequestContext = Depends(get_request_context),
    system: BankingSystem = Depends(get_banking_system)
):
    """Close the caller's session"""
    return system.banking.logout(ctx)
