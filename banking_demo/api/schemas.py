"""
Pydantic schemas for API requests
"""

from typing import Any, Optional
from pydantic import BaseModel, ConfigDict, Field


class LoginRequest(BaseModel):
    username: str
    password: str


class TransferRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    # Left untyped so a bad amount is reported as INVALID_AMOUNT (400), not 422
    amount: Any = None
    to_account: Optional[str] = Field(None, alias="toAccount")
    from_account: Optional[str] = Field(None, alias="fromAccount")
