from sqlalchemy import or_

from library_ledger.models.book import Book
from library_ledger.extensions import db


class BookRepo:
    @staticmethod
    def list_all():
        return Book.query.order_by(Book.id.desc()).all()

    @staticmethod
    def search(search: str | None = None, category: str | None = None):
        q = Book.query
        if search:
            pattern = f"%{search}%"
            q = q.filter(or_(Book.title.ilike(pattern), Book.author.ilike(pattern)))
        if category and category != "all":
            q = q.filter(Book.category == category)
        return q.order_by(Book.id.desc()).all()

    @staticmethod
    def categories():
        rows = db.session.query(Book.category).distinct().order_by(Book.category.asc()).all()
        return [c for (c,) in rows]

    @staticmethod
    def get(book_id: int):
        return db.session.get(Book, book_id)

    @staticmethod
    def get_by_isbn(isbn: str):
        return Book.query.filter_by(isbn=isbn).first()

    @staticmethod
    def get_many(book_ids):
        if not book_ids:
            return {}
        return {b.id: b for b in Book.query.filter(Book.id.in_(list(book_ids))).all()}

    @staticmethod
    def create(book: Book):
        db.session.add(book)
        db.session.commit()
        return book

    @staticmethod
    def take_copy(book_id: int) -> bool:
        """Conditionally decrement available copies; False when none are left.

        Runs inside the caller's transaction and does not commit.
        """
        affected = (
            Book.query
            .filter(Book.id == book_id, Book.available_copies > 0)
            .update({Book.available_copies: Book.available_copies - 1}, synchronize_session=False)
        )
        return affected == 1

    @staticmethod
    def put_back_copy(book_id: int) -> bool:
        """Conditionally increment available copies; False when already at total."""
        affected = (
            Book.query
            .filter(Book.id == book_id, Book.available_copies < Book.total_copies)
            .update({Book.available_copies: Book.available_copies + 1}, synchronize_session=False)
        )
        return affected == 1

    @staticmethod
    def count_out_of_stock() -> int:
        return Book.query.filter(Book.available_copies == 0).count()

    @staticmethod
    def count_low_stock(threshold: int) -> int:
        return Book.query.filter(Book.available_copies > 0, Book.available_copies < threshold).count()
