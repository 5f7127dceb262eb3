"""Error kinds raised by the ledger services.

Every kind is a ``ValueError`` so controllers can keep catching business-rule
failures the same way they catch bad input; ``code`` is the machine readable
kind sent to clients and ``status_code`` the HTTP status it maps to.
"""


class LedgerError(ValueError):
    code = "ledger_error"
    status_code = 400
    default_message = "Request could not be processed"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.default_message)

    def to_dict(self) -> dict:
        return {"success": False, "error": self.code, "message": str(self)}


class ValidationError(LedgerError):
    code = "validation_error"
    status_code = 400
    default_message = "Invalid request"


class InvalidCredentials(LedgerError):
    code = "invalid_credentials"
    status_code = 401
    default_message = "Invalid email or password"


class BookNotFound(LedgerError):
    code = "book_not_found"
    status_code = 404
    default_message = "Book not found"


class BookUnavailable(LedgerError):
    code = "book_unavailable"
    status_code = 409
    default_message = "Book not available"


class AlreadyBorrowed(LedgerError):
    code = "already_borrowed"
    status_code = 409
    default_message = "You have already borrowed this book"


class NoActiveLoan(LedgerError):
    code = "no_active_loan"
    status_code = 409
    default_message = "No active borrow record found"


class EmailTaken(LedgerError):
    code = "email_taken"
    status_code = 409
    default_message = "User already exists"


class LedgerIntegrityError(LedgerError):
    """The stores disagree in a way correct operation can never produce."""

    code = "ledger_integrity_error"
    status_code = 500
    default_message = "Ledger integrity check failed"
