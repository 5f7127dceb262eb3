from datetime import datetime, timedelta

from flask import current_app
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from library_ledger.errors import (
    AlreadyBorrowed,
    BookNotFound,
    BookUnavailable,
    LedgerError,
    LedgerIntegrityError,
    NoActiveLoan,
)
from library_ledger.extensions import db
from library_ledger.models.borrow import BorrowRecord, BORROWED
from library_ledger.repositories.book_repo import BookRepo
from library_ledger.repositories.borrow_repo import BorrowRepo
from library_ledger.utils.clock import utcnow

DEFAULT_LOAN_PERIOD_DAYS = 14


class LendingService:
    """Borrow and return, each applied to the catalog and the ledger as one unit.

    Copy counts and record status change through conditional UPDATEs so two
    concurrent callers can never both win the last copy or both close the
    same loan. Any failure rolls the whole session back before re-raising.
    """

    @staticmethod
    def _loan_period() -> timedelta:
        days = current_app.config.get("LOAN_PERIOD_DAYS", DEFAULT_LOAN_PERIOD_DAYS)
        return timedelta(days=int(days))

    @staticmethod
    def borrow_book(user_id: int, book_id: int, now: datetime | None = None) -> BorrowRecord:
        now = now or utcnow()

        try:
            book = BookRepo.get(book_id)
            if not book:
                raise BookNotFound()

            if book.available_copies is None or book.available_copies < 1:
                raise BookUnavailable()

            if BorrowRepo.find_active(user_id, book_id):
                raise AlreadyBorrowed()

            # the read above may be stale; the conditional decrement decides
            if not BookRepo.take_copy(book_id):
                raise BookUnavailable()

            record = BorrowRecord(
                user_id=user_id,
                book_id=book_id,
                borrow_date=now,
                due_date=now + LendingService._loan_period(),
                status=BORROWED,
            )
            BorrowRepo.add(record)

            db.session.commit()

        except IntegrityError:
            # partial unique index: another request opened this loan first
            db.session.rollback()
            current_app.logger.info(f"[lending] duplicate active loan user={user_id} book={book_id}")
            raise AlreadyBorrowed()
        except LedgerError as e:
            db.session.rollback()
            current_app.logger.info(f"[lending] borrow refused user={user_id} book={book_id}: {e.code}")
            raise
        except SQLAlchemyError:
            db.session.rollback()
            current_app.logger.exception(f"[lending] borrow failed user={user_id} book={book_id}")
            raise

        current_app.logger.info(
            f"[lending] borrowed record={record.id} user={user_id} book={book_id} due={record.due_date.isoformat()}"
        )
        return record

    @staticmethod
    def return_book(user_id: int, book_id: int, now: datetime | None = None) -> BorrowRecord:
        now = now or utcnow()

        try:
            record = BorrowRepo.find_active(user_id, book_id)
            if not record:
                raise NoActiveLoan()

            if not BorrowRepo.mark_returned(record.id, now):
                # closed by a concurrent return between the read and the update
                raise NoActiveLoan()

            if not BookRepo.put_back_copy(book_id):
                raise LedgerIntegrityError(
                    f"Returning book {book_id} would exceed its total copies"
                )

            db.session.commit()

        except LedgerIntegrityError:
            db.session.rollback()
            current_app.logger.error(f"[lending] integrity check failed on return user={user_id} book={book_id}")
            raise
        except LedgerError as e:
            db.session.rollback()
            current_app.logger.info(f"[lending] return refused user={user_id} book={book_id}: {e.code}")
            raise
        except SQLAlchemyError:
            db.session.rollback()
            current_app.logger.exception(f"[lending] return failed user={user_id} book={book_id}")
            raise

        # bulk updates bypass the identity map
        db.session.refresh(record)
        current_app.logger.info(f"[lending] returned record={record.id} user={user_id} book={book_id}")
        return record

    @staticmethod
    def active_loans(user_id: int):
        """Active records for the user joined with their book, newest first.

        Records whose book row is missing are left out.
        """
        records = BorrowRepo.list_active_by_user(user_id)
        books = BookRepo.get_many({r.book_id for r in records})
        return [(r, books[r.book_id]) for r in records if r.book_id in books]

    @staticmethod
    def overdue_loans(now: datetime | None = None):
        """Overdue records joined with book and borrower, oldest due date first."""
        now = now or utcnow()
        rows = []
        for r in BorrowRepo.find_overdue(now):
            book, user = r.book, r.user
            if book is None or user is None:
                continue
            rows.append((r, book, user))
        return rows

