import threading
from datetime import timedelta

import pytest
from sqlalchemy.exc import IntegrityError
from werkzeug.security import generate_password_hash

from library_ledger import create_app
from library_ledger.config import TestConfig
from library_ledger.errors import AlreadyBorrowed, LedgerError
from library_ledger.extensions import db
from library_ledger.models.book import Book
from library_ledger.models.borrow import BorrowRecord
from library_ledger.models.user import User
from library_ledger.repositories.borrow_repo import BorrowRepo
from library_ledger.services.lending_service import LendingService

from conftest import NOW

RACERS = 8


@pytest.fixture
def file_app(tmp_path):
    """An app on a SQLite file so each thread gets its own connection."""

    class FileConfig(TestConfig):
        SQLALCHEMY_DATABASE_URI = f"sqlite:///{tmp_path / 'ledger.db'}"
        SQLALCHEMY_ENGINE_OPTIONS = {"connect_args": {"timeout": 30, "check_same_thread": False}}

    app = create_app(FileConfig)
    with app.app_context():
        db.create_all()
    yield app
    with app.app_context():
        db.drop_all()
        db.engine.dispose()


def _seed(app, copies):
    with app.app_context():
        book = Book(title="Last Copy", author="A", isbn="978-1-11-111111-1", category="Fiction",
                    description="", total_copies=copies, available_copies=copies, created_at=NOW)
        users = [
            User(name=f"Racer {i}", email=f"racer{i}@example.com",
                 password_hash=generate_password_hash("secret"), role="user", created_at=NOW)
            for i in range(RACERS)
        ]
        db.session.add(book)
        db.session.add_all(users)
        db.session.commit()
        return book.id, [u.id for u in users]


def _race(app, book_id, user_ids):
    barrier = threading.Barrier(len(user_ids))
    results = []
    lock = threading.Lock()

    def borrow(user_id):
        with app.app_context():
            barrier.wait(timeout=30)
            try:
                LendingService.borrow_book(user_id, book_id)
                outcome = "ok"
            except LedgerError as e:
                outcome = e.code
            except Exception as e:  # surfaced through the assertions below
                outcome = repr(e)
            with lock:
                results.append(outcome)

    threads = [threading.Thread(target=borrow, args=(uid,)) for uid in user_ids]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=60)
    return results


def test_users_racing_for_last_copy_get_exactly_one_loan(file_app):
    book_id, user_ids = _seed(file_app, copies=1)

    results = _race(file_app, book_id, user_ids)

    assert len(results) == RACERS
    assert results.count("ok") == 1
    assert results.count("book_unavailable") == RACERS - 1

    with file_app.app_context():
        assert db.session.get(Book, book_id).available_copies == 0
        assert BorrowRecord.query.filter_by(book_id=book_id, status="borrowed").count() == 1


def test_racing_for_several_copies_never_oversells(file_app):
    book_id, user_ids = _seed(file_app, copies=3)

    results = _race(file_app, book_id, user_ids)

    assert results.count("ok") == 3
    assert results.count("book_unavailable") == RACERS - 3

    with file_app.app_context():
        assert db.session.get(Book, book_id).available_copies == 0
        assert BorrowRecord.query.filter_by(book_id=book_id, status="borrowed").count() == 3


def test_store_rejects_second_active_record_for_same_pair(make_book, make_user, make_record):
    book = make_book(total=2)
    user = make_user()
    make_record(user, book, NOW, NOW + timedelta(days=14))

    db.session.add(BorrowRecord(user_id=user.id, book_id=book.id, borrow_date=NOW,
                                due_date=NOW + timedelta(days=14), status="borrowed"))
    with pytest.raises(IntegrityError):
        db.session.flush()
    db.session.rollback()

    # a returned row for the same pair is history, not a second loan
    make_record(user, book, NOW - timedelta(days=30), NOW - timedelta(days=16),
                status="returned", return_date=NOW - timedelta(days=20))
    assert BorrowRecord.query.filter_by(user_id=user.id, book_id=book.id).count() == 2


def test_duplicate_loan_caught_by_store_becomes_already_borrowed(make_book, make_user, monkeypatch):
    book = make_book(total=3)
    user = make_user()
    LendingService.borrow_book(user.id, book.id, now=NOW)

    # the active-loan read misses the first loan, as a concurrent request would
    monkeypatch.setattr(BorrowRepo, "find_active", staticmethod(lambda user_id, book_id: None))
    with pytest.raises(AlreadyBorrowed):
        LendingService.borrow_book(user.id, book.id, now=NOW + timedelta(minutes=1))
    monkeypatch.undo()

    db.session.expire_all()
    assert db.session.get(Book, book.id).available_copies == 2
    assert BorrowRecord.query.filter_by(user_id=user.id, book_id=book.id, status="borrowed").count() == 1
