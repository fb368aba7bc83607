"""
Banking Operations Module

Login, transfer, balance inquiry, transaction history and logout over the
ledger store. Every step reports through the telemetry dispatcher; telemetry
never changes an operation's result.
"""

from dataclasses import dataclass, field
from datetime import date, datetime, time, timezone
from typing import Any, Dict, List, Optional
import uuid

from .errors import (
    BankingError,
    InsufficientFundsError,
    InvalidAccountError,
    InvalidAmountError,
    InvalidCredentialsError,
    InvalidDestinationAccountError,
    InvalidSourceAccountError,
    NotAuthenticatedError,
)
from .events import BankingEvent, TelemetryDispatcher, new_correlation_id
from .models import LedgerState, TransactionRecord, User, parse_amount, parse_timestamp
from .sessions import SessionGuard
from .storage import LedgerStore


DEFAULT_ACCOUNT = "checking"


@dataclass
class RequestContext:
    """Per-request values threaded through an operation"""
    correlation_id: str = field(default_factory=new_correlation_id)
    session_id: Optional[str] = None
    user: Optional[User] = None
    client_ip: Optional[str] = None

    @property
    def actor(self) -> Dict[str, Any]:
        return self.user.actor() if self.user else {}


class BankingService:
    """Request/response banking operations"""

    def __init__(self, store: LedgerStore, sessions: SessionGuard, telemetry: TelemetryDispatcher):
        self.store = store
        self.sessions = sessions
        self.telemetry = telemetry

    def _emit(self, ctx: RequestContext, event_type: BankingEvent, data: Optional[Dict[str, Any]] = None,
              level: str = "INFO", actor: Optional[Dict[str, Any]] = None) -> None:
        self.telemetry.emit(
            event_type,
            actor=actor if actor is not None else ctx.actor,
            data=data,
            correlation_id=ctx.correlation_id,
            level=level,
        )

    def _debug(self, ctx: RequestContext, message: str) -> None:
        self.telemetry.debug(message, correlation_id=ctx.correlation_id)

    def _current_user(self, ctx: RequestContext, state: LedgerState) -> User:
        """Re-read the authenticated user from freshly loaded state"""
        if ctx.user is None:
            raise NotAuthenticatedError()
        user = state.get_user(ctx.user.id)
        if user is None:
            raise NotAuthenticatedError()
        return user

    # Login / logout

    def login(self, ctx: RequestContext, username: str, password: str) -> Dict[str, Any]:
        """
        Authenticate with a plaintext password and open a session.

        Raises:
            InvalidCredentialsError: unknown user or wrong password
        """
        attempt_actor = {"username": username}
        self._emit(ctx, BankingEvent.LOGIN_INITIATED, {"ip": ctx.client_ip}, actor=attempt_actor)
        self._debug(ctx, "CREDENTIAL_VALIDATION_PHASE_1")

        state = self.store.load()
        user = state.get_user(username)

        if user is None or user.password != password:
            self._emit(ctx, BankingEvent.LOGIN_FAILED, {"reason": InvalidCredentialsError.code},
                       level="WARNING", actor=attempt_actor)
            raise InvalidCredentialsError()

        session_id = self.sessions.create(state, user.id)
        self.store.save(state)

        ctx.session_id = session_id
        ctx.user = user
        self._emit(ctx, BankingEvent.LOGIN_SUCCESS, {"sessionId": session_id})

        return {"sessionId": session_id, "user": user.summary()}

    def logout(self, ctx: RequestContext) -> Dict[str, Any]:
        """Delete the caller's session"""
        self._emit(ctx, BankingEvent.LOGOUT, {"sessionId": ctx.session_id})

        state = self.store.load()
        if ctx.session_id:
            self.sessions.destroy(state, ctx.session_id)
        self.store.save(state)

        self._emit(ctx, BankingEvent.LOGOUT_SUCCESS)
        return {"success": True}

    # Transfers

    def transfer(self, ctx: RequestContext, amount: Any, to_account: Optional[str],
                 from_account: Optional[str] = None) -> Dict[str, Any]:
        """
        Move money between two of the caller's accounts.

        Checks run in order: amount, source account, destination account,
        funds. A failed check leaves the ledger untouched.

        Raises:
            InvalidAmountError, InvalidSourceAccountError,
            InvalidDestinationAccountError, InsufficientFundsError
        """
        from_account = from_account or DEFAULT_ACCOUNT
        self._emit(ctx, BankingEvent.TRANSFER_INITIATED, {
            "amount": amount, "fromAccount": from_account, "toAccount": to_account,
        })
        self._debug(ctx, "REQUEST_VALIDATION_PHASE_1")

        try:
            value = parse_amount(amount)
        except ValueError:
            value = None
        if value is None or value <= 0:
            self._transfer_failed(ctx, InvalidAmountError(), {"amount": amount})

        state = self.store.load()
        user = self._current_user(ctx, state)

        source = user.accounts.get(from_account)
        if source is None:
            self._transfer_failed(ctx, InvalidSourceAccountError(), {"fromAccount": from_account})

        destination = user.accounts.get(to_account) if to_account else None
        if destination is None:
            self._transfer_failed(ctx, InvalidDestinationAccountError(), {"toAccount": to_account})

        if source.balance < value:
            self._transfer_failed(ctx, InsufficientFundsError(), {
                "requested": value, "available": source.balance, "account": from_account,
            })

        source.balance -= value
        destination.balance += value

        state.transactions.append(TransactionRecord(
            id=f"txn_{uuid.uuid4().hex}",
            from_account=from_account,
            to_account=to_account,
            user_id=user.id,
            amount=value,
            timestamp=datetime.now(timezone.utc),
            correlation_id=ctx.correlation_id,
        ))
        self.store.save(state)

        self._emit(ctx, BankingEvent.TRANSFER_SUCCESS, {
            "amount": value,
            "fromAccount": from_account,
            "toAccount": to_account,
            "newBalance": source.balance,
        })

        return {
            "success": True,
            "newBalance": source.balance,
            "toAccountName": destination.display_name,
        }

    def _transfer_failed(self, ctx: RequestContext, error: BankingError, data: Dict[str, Any]) -> None:
        self._emit(ctx, BankingEvent.TRANSFER_FAILED, {"reason": error.code, **data}, level="ERROR")
        raise error

    # Queries

    def get_balance(self, ctx: RequestContext, account: Optional[str] = None) -> Dict[str, Any]:
        """
        Raises:
            InvalidAccountError: the caller has no account of that kind
        """
        account = account or DEFAULT_ACCOUNT
        self._emit(ctx, BankingEvent.BALANCE_CHECK, {"account": account})

        state = self.store.load()
        user = self._current_user(ctx, state)

        found = user.accounts.get(account)
        if found is None:
            self._emit(ctx, BankingEvent.BALANCE_FAILED,
                       {"account": account, "reason": InvalidAccountError.code}, level="WARNING")
            raise InvalidAccountError()

        self._emit(ctx, BankingEvent.BALANCE_RESPONSE, {"account": account, "balance": found.balance})
        return {"balance": found.balance, "accountName": found.display_name, "accountType": account}

    def list_transactions(self, ctx: RequestContext, account_type: Optional[str] = None,
                          start_date: Optional[str] = None, end_date: Optional[str] = None) -> Dict[str, Any]:
        """
        The caller's transfers, newest first.

        ``account_type`` matches either leg. Date bounds are inclusive ISO-8601; a
        date-only ``end_date`` covers that whole day. A bound that is not
        ISO-8601 is ignored (reported as a WARNING event) rather than rejected.
        """
        self._emit(ctx, BankingEvent.TRANSACTION_HISTORY, {
            "accountType": account_type, "startDate": start_date, "endDate": end_date,
        })
        self._debug(ctx, "TRANSACTION_FETCH_PHASE_1")

        state = self.store.load()
        user = self._current_user(ctx, state)
        transactions: List[TransactionRecord] = [t for t in state.transactions if t.user_id == user.id]

        if account_type:
            self._debug(ctx, f"FILTER_ACCOUNT_{account_type.upper()}")
            transactions = [t for t in transactions if t.touches(account_type)]

        if start_date:
            self._debug(ctx, f"FILTER_START_DATE_{start_date}")
            start = self._parse_bound(ctx, "startDate", start_date, end_of_day=False)
            if start is not None:
                transactions = [t for t in transactions if t.timestamp >= start]

        if end_date:
            self._debug(ctx, f"FILTER_END_DATE_{end_date}")
            end = self._parse_bound(ctx, "endDate", end_date, end_of_day=True)
            if end is not None:
                transactions = [t for t in transactions if t.timestamp <= end]

        transactions.sort(key=lambda t: t.timestamp, reverse=True)

        self._emit(ctx, BankingEvent.TRANSACTION_HISTORY_SUCCESS, {"count": len(transactions)})
        return {"transactions": [t.to_public_dict() for t in transactions]}

    def _parse_bound(self, ctx: RequestContext, name: str, value: str, end_of_day: bool) -> Optional[datetime]:
        try:
            day = date.fromisoformat(value)
        except ValueError:
            day = None
        if day is not None:
            return datetime.combine(day, time.max if end_of_day else time.min, tzinfo=timezone.utc)

        try:
            return parse_timestamp(value)
        except ValueError:
            self._emit(ctx, BankingEvent.TRANSACTION_HISTORY_INVALID_DATE,
                       {"field": name, "value": value}, level="WARNING")
            return None
