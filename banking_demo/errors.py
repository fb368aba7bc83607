"""
Banking error taxonomy

Validation failures map to HTTP 400, authentication failures to HTTP 401.
Each error carries a short machine-checkable ``code``.
"""


class BankingError(ValueError):
    """Base class for expected banking failures"""
    status_code = 400
    code = "BANKING_ERROR"
    message = "Banking operation failed"

    def __init__(self, message: str = None):
        super().__init__(message or self.message)

    def to_dict(self) -> dict:
        return {"error": str(self), "code": self.code}


class ValidationError(BankingError):
    status_code = 400
    code = "VALIDATION_ERROR"
    message = "Invalid request"


class InvalidAmountError(ValidationError):
    code = "INVALID_AMOUNT"
    message = "Invalid amount"


class InvalidSourceAccountError(ValidationError):
    code = "INVALID_SOURCE_ACCOUNT"
    message = "Invalid source account"


class InvalidDestinationAccountError(ValidationError):
    code = "INVALID_DESTINATION_ACCOUNT"
    message = "Invalid destination account"


class InsufficientFundsError(ValidationError):
    code = "INSUFFICIENT_FUNDS"
    message = "Insufficient funds"


class InvalidAccountError(ValidationError):
    code = "INVALID_ACCOUNT"
    message = "Invalid account type"


class AuthenticationError(BankingError):
    status_code = 401
    code = "NOT_AUTHENTICATED"
    message = "Not authenticated"


class InvalidCredentialsError(AuthenticationError):
    code = "INVALID_CREDENTIALS"
    message = "Invalid credentials"


class NotAuthenticatedError(AuthenticationError):
    code = "NOT_AUTHENTICATED"
    message = "Not authenticated"
