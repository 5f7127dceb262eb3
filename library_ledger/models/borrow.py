from datetime import datetime
from library_ledger.extensions import db

BORROWED = "borrowed"
RETURNED = "returned"

SECONDS_PER_DAY = 24 * 60 * 60


class BorrowRecord(db.Model):
    __tablename__ = "borrow_records"
    __table_args__ = (
        # at most one active loan per (user, book); returned rows are history
        db.Index(
            "uq_borrow_records_active_loan",
            "user_id",
            "book_id",
            unique=True,
            sqlite_where=db.text("status = 'borrowed'"),
            postgresql_where=db.text("status = 'borrowed'"),
        ),
        db.CheckConstraint("status IN ('borrowed', 'returned')", name="ck_borrow_records_status"),
    )

    id = db.Column(db.Integer, primary_key=True)

    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    book_id = db.Column(db.Integer, db.ForeignKey("books.id"), nullable=False, index=True)

    borrow_date = db.Column(db.DateTime, nullable=False, default=datetime.utcnow, index=True)
    due_date = db.Column(db.DateTime, nullable=False, index=True)
    return_date = db.Column(db.DateTime, nullable=True)

    status = db.Column(db.String(20), nullable=False, default=BORROWED, index=True)

    user = db.relationship("User", backref=db.backref("borrow_records", lazy="dynamic"))
    book = db.relationship("Book", backref=db.backref("borrow_records", lazy="dynamic"))

    @property
    def is_active(self) -> bool:
        return self.status == BORROWED

    def is_overdue(self, now: datetime) -> bool:
        return self.is_active and self.due_date < now

    def days_until_due(self, now: datetime) -> float:
        """Fractional days until due; negative once the loan is overdue."""
        return (self.due_date - now).total_seconds() / SECONDS_PER_DAY

    def days_overdue(self, now: datetime) -> float:
        return (now - self.due_date).total_seconds() / SECONDS_PER_DAY
