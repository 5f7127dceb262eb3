from datetime import datetime
from library_ledger.models.borrow import BorrowRecord, BORROWED, RETURNED
from library_ledger.extensions import db


class BorrowRepo:
    @staticmethod
    def list_all():
        return BorrowRecord.query.order_by(BorrowRecord.id.desc()).all()

    @staticmethod
    def list_active_by_user(user_id: int):
        return (
            BorrowRecord.query
            .filter_by(user_id=user_id, status=BORROWED)
            .order_by(BorrowRecord.borrow_date.desc())
            .all()
        )

    @staticmethod
    def find_active(user_id: int, book_id: int):
        return BorrowRecord.query.filter_by(user_id=user_id, book_id=book_id, status=BORROWED).first()

    @staticmethod
    def add(record: BorrowRecord):
        """Stage a new record and flush it so index violations surface here."""
        db.session.add(record)
        db.session.flush()
        return record

    @staticmethod
    def mark_returned(record_id: int, returned_at: datetime) -> bool:
        """Conditionally move an active record to returned; does not commit."""
        affected = (
            BorrowRecord.query
            .filter(BorrowRecord.id == record_id, BorrowRecord.status == BORROWED)
            .update(
                {BorrowRecord.status: RETURNED, BorrowRecord.return_date: returned_at},
                synchronize_session=False,
            )
        )
        return affected == 1

    @staticmethod
    def find_overdue(now: datetime):
        return (
            BorrowRecord.query
            .filter(BorrowRecord.status == BORROWED, BorrowRecord.due_date < now)
            .order_by(BorrowRecord.due_date.asc())
            .all()
        )

    @staticmethod
    def count_overdue(now: datetime) -> int:
        return BorrowRecord.query.filter(
            BorrowRecord.status == BORROWED,
            BorrowRecord.due_date < now
        ).count()

    @staticmethod
    def count_due_between(start: datetime, end: datetime) -> int:
        return BorrowRecord.query.filter(
            BorrowRecord.status == BORROWED,
            BorrowRecord.due_date >= start,
            BorrowRecord.due_date < end
        ).count()

    @staticmethod
    def count_active_borrowed_since(since: datetime) -> int:
        return BorrowRecord.query.filter(
            BorrowRecord.status == BORROWED,
            BorrowRecord.borrow_date >= since
        ).count()
