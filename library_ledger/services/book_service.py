from flask import current_app
from sqlalchemy.exc import IntegrityError

from library_ledger.errors import BookNotFound, ValidationError
from library_ledger.extensions import db
from library_ledger.models.book import Book
from library_ledger.repositories.book_repo import BookRepo
from library_ledger.utils.clock import utcnow
from library_ledger.utils.validation import text_field, whole_number

TEXT_FIELDS = ("title", "author", "isbn", "category")
REQUIRED_FIELDS = TEXT_FIELDS + ("total_copies",)


class BookService:
    @staticmethod
    def list_books(search: str | None = None, category: str | None = None):
        search = (search or "").strip() or None
        category = (category or "").strip() or None
        return BookRepo.search(search=search, category=category)

    @staticmethod
    def list_categories():
        return BookRepo.categories()

    @staticmethod
    def get_book(book_id: int):
        book = BookRepo.get(book_id)
        if not book:
            raise BookNotFound()
        return book

    @staticmethod
    def create_book(data: dict):
        values = {k: text_field(data, k) for k in TEXT_FIELDS}
        values["total_copies"] = data.get("total_copies")

        missing = [k for k in REQUIRED_FIELDS if values[k] in (None, "")]
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")

        total = whole_number(values["total_copies"], "total_copies", minimum=0)

        if BookRepo.get_by_isbn(values["isbn"]):
            raise ValidationError(f"A book with ISBN {values['isbn']} already exists")

        book = Book(
            title=values["title"],
            author=values["author"],
            isbn=values["isbn"],
            category=values["category"],
            description=text_field(data, "description"),
            total_copies=total,
            available_copies=total,
            created_at=utcnow(),
        )
        try:
            BookRepo.create(book)
        except IntegrityError:
            db.session.rollback()
            raise ValidationError(f"A book with ISBN {values['isbn']} already exists")

        current_app.logger.info(f"[catalog] added book={book.id} isbn={book.isbn} copies={total}")
        return book
