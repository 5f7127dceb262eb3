from datetime import datetime

import pytest
from flask_jwt_extended import create_access_token
from werkzeug.security import generate_password_hash

from library_ledger import create_app
from library_ledger.config import TestConfig
from library_ledger.extensions import db
from library_ledger.models.book import Book
from library_ledger.models.borrow import BorrowRecord
from library_ledger.models.user import User

NOW = datetime(2024, 6, 15, 12, 0, 0)


@pytest.fixture
def app():
    app = create_app(TestConfig)
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def make_book(app):
    counter = {"n": 0}

    def _make(total=1, available=None, category="Fiction", title=None, author="Some Author"):
        counter["n"] += 1
        n = counter["n"]
        book = Book(
            title=title or f"Book {n}",
            author=author,
            isbn=f"978-0-00-{n:06d}",
            category=category,
            description="",
            total_copies=total,
            available_copies=total if available is None else available,
            created_at=NOW,
        )
        db.session.add(book)
        db.session.commit()
        return book

    return _make


@pytest.fixture
def make_user(app):
    counter = {"n": 0}

    def _make(role="user", name=None):
        counter["n"] += 1
        n = counter["n"]
        user = User(
            name=name or f"User {n}",
            email=f"user{n}@example.com",
            password_hash=generate_password_hash("secret"),
            role=role,
            created_at=NOW,
        )
        db.session.add(user)
        db.session.commit()
        return user

    return _make


@pytest.fixture
def make_record(app):
    def _make(user, book, borrow_date, due_date, status="borrowed", return_date=None):
        record = BorrowRecord(
            user_id=user.id,
            book_id=book.id,
            borrow_date=borrow_date,
            due_date=due_date,
            return_date=return_date,
            status=status,
        )
        db.session.add(record)
        db.session.commit()
        return record

    return _make


@pytest.fixture
def auth_header(app):
    def _header(user):
        token = create_access_token(identity=str(user.id), additional_claims={"role": user.role})
        return {"Authorization": f"Bearer {token}"}

    return _header
