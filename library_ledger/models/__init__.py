from library_ledger.models.book import Book
from library_ledger.models.borrow import BorrowRecord
from library_ledger.models.user import User

__all__ = ["Book", "BorrowRecord", "User"]
