from datetime import datetime
from library_ledger.extensions import db
from library_ledger.models.borrow import BorrowRecord, BORROWED

ROLE_USER = "user"
ROLE_ADMIN = "admin"


class User(db.Model):
    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(120), nullable=False)
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(255), nullable=False)

    role = db.Column(db.String(20), nullable=False, default=ROLE_USER)  # user/admin

    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    @property
    def borrowed_book_ids(self) -> set:
        """Books this user currently holds, read straight from the ledger."""
        rows = (
            db.session.query(BorrowRecord.book_id)
            .filter(BorrowRecord.user_id == self.id, BorrowRecord.status == BORROWED)
            .all()
        )
        return {book_id for (book_id,) in rows}
