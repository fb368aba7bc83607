"""
Ledger Data Model

Users, accounts, sessions and transaction records held by the ledger store.
Records serialize to the camelCase JSON layout of the demo's ``data.json``;
monetary values are stored as Decimal strings.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal, ROUND_HALF_UP, InvalidOperation
from typing import Any, Dict, List, Optional


CENTS = Decimal("0.01")


def to_amount(value: Any) -> Decimal:
    """Convert a stored or requested amount to a 2-place Decimal.

    Floats go through ``str`` so that 0.1 becomes Decimal("0.10") rather than
    its binary expansion. Raises ValueError for anything non-numeric.
    """
    if isinstance(value, bool) or value is None:
        raise ValueError(f"Not a monetary amount: {value!r}")
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value))
        if not amount.is_finite():
            raise ValueError(f"Not a monetary amount: {value!r}")
        return amount.quantize(CENTS, rounding=ROUND_HALF_UP)
    except (InvalidOperation, ValueError) as e:
        raise ValueError(f"Not a monetary amount: {value!r}") from e


def parse_amount(value: Any) -> Decimal:
    """Validate a requested amount without rounding it.

    Raises ValueError for anything :func:`to_amount` rejects and for
    fractions of a cent.
    """
    amount = to_amount(value)
    if amount != Decimal(str(value)):
        raise ValueError(f"More than two decimal places: {value!r}")
    return amount


def parse_timestamp(value: Any) -> datetime:
    """Parse an ISO timestamp; naive values are taken as UTC"""
    if isinstance(value, datetime):
        parsed = value
    else:
        parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def format_timestamp(value: datetime) -> str:
    """ISO-8601 UTC with millisecond precision and a ``Z`` suffix"""
    return value.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass
class Account:
    """A single account held by a user, keyed by its kind"""
    account_number: str
    balance: Decimal
    type: str
    display_name: str

    def __post_init__(self):
        self.balance = to_amount(self.balance)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "accountNumber": self.account_number,
            "balance": str(self.balance),
            "type": self.type,
            "displayName": self.display_name,
        }

    def to_public_dict(self) -> Dict[str, Any]:
        """API view: balance stays a Decimal so responses carry a JSON number"""
        return {**self.to_dict(), "balance": self.balance}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Account':
        return cls(
            account_number=data["accountNumber"],
            balance=to_amount(data["balance"]),
            type=data["type"],
            display_name=data["displayName"],
        )


@dataclass
class User:
    """
    Demo user. The password is held in plaintext: a documented flaw of the
    demo, compared as-is at login.
    """
    id: str
    name: str
    password: str
    accounts: Dict[str, Account] = field(default_factory=dict)

    def summary(self) -> Dict[str, Any]:
        """Public view returned by login (no password)"""
        return {
            "id": self.id,
            "name": self.name,
            "accounts": {kind: account.to_public_dict() for kind, account in self.accounts.items()},
        }

    def actor(self) -> Dict[str, str]:
        """Identity attached to telemetry events"""
        return {"id": self.id, "name": self.name}

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "password": self.password,
            "accounts": {kind: account.to_dict() for kind, account in self.accounts.items()},
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'User':
        return cls(
            id=data["id"],
            name=data["name"],
            password=data["password"],
            accounts={kind: Account.from_dict(acc) for kind, acc in data.get("accounts", {}).items()},
        )


@dataclass
class Session:
    """Opaque session record. No expiry."""
    user_id: str
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> Dict[str, Any]:
        return {"userId": self.user_id, "createdAt": format_timestamp(self.created_at)}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Session':
        return cls(user_id=data["userId"], created_at=parse_timestamp(data["createdAt"]))


@dataclass(frozen=True)
class TransactionRecord:
    """Immutable transfer record appended to the ledger's history"""
    id: str
    from_account: str
    to_account: str
    user_id: str
    amount: Decimal
    timestamp: datetime
    correlation_id: str

    def touches(self, account_kind: str) -> bool:
        """True when either leg of the transfer is ``account_kind``"""
        return self.from_account == account_kind or self.to_account == account_kind

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "from": self.from_account,
            "to": self.to_account,
            "userId": self.user_id,
            "amount": str(self.amount),
            "timestamp": format_timestamp(self.timestamp),
            "correlationId": self.correlation_id,
        }

    def to_public_dict(self) -> Dict[str, Any]:
        return {**self.to_dict(), "amount": self.amount}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'TransactionRecord':
        return cls(
            id=data["id"],
            from_account=data["from"],
            to_account=data["to"],
            user_id=data["userId"],
            amount=to_amount(data["amount"]),
            timestamp=parse_timestamp(data["timestamp"]),
            correlation_id=data.get("correlationId", ""),
        )


@dataclass
class LedgerState:
    """Full ledger: users by id, sessions by id and the ordered transaction log"""
    users: Dict[str, User] = field(default_factory=dict)
    sessions: Dict[str, Session] = field(default_factory=dict)
    transactions: List[TransactionRecord] = field(default_factory=list)

    def get_user(self, user_id: str) -> Optional[User]:
        return self.users.get(user_id)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "users": {user_id: user.to_dict() for user_id, user in self.users.items()},
            "sessions": {session_id: session.to_dict() for session_id, session in self.sessions.items()},
            "transactions": [txn.to_dict() for txn in self.transactions],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'LedgerState':
        return cls(
            users={user_id: User.from_dict(user) for user_id, user in data.get("users", {}).items()},
            sessions={sid: Session.from_dict(s) for sid, s in data.get("sessions", {}).items()},
            transactions=[TransactionRecord.from_dict(t) for t in data.get("transactions", [])],
        )
