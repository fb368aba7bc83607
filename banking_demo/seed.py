"""Demo seed data for the banking ledger

Two customers with checking/savings (and for john_doe, investment) accounts,
no sessions and an empty transaction history.
"""

from decimal import Decimal

from .models import Account, LedgerState, User


DEMO_USERS = {
    "john_doe": {
        "name": "John Doe",
        "password": "password123",
        "accounts": [
            ("checking", "ACC-001", "5000", "Checking Account"),
            ("savings", "ACC-002", "10000", "Savings Account"),
            ("investments", "ACC-003", "15000", "Investment Account"),
        ],
    },
    "jane_smith": {
        "name": "Jane Smith",
        "password": "secure456",
        "accounts": [
            ("checking", "ACC-101", "3000", "Checking Account"),
            ("savings", "ACC-102", "8000", "Savings Account"),
        ],
    },
}


def default_ledger_state() -> LedgerState:
    """Build a fresh ledger holding the demo users"""
    users = {}
    for user_id, profile in DEMO_USERS.items():
        accounts = {
            kind: Account(
                account_number=number,
                balance=Decimal(balance),
                type=kind,
                display_name=display_name,
            )
            for kind, number, balance, display_name in profile["accounts"]
        }
        users[user_id] = User(id=user_id, name=profile["name"], password=profile["password"], accounts=accounts)
    return LedgerState(users=users)
