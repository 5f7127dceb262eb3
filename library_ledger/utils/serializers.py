from datetime import datetime


def _ts(value):
    return value.isoformat() if value else None


def book_json(b) -> dict:
    return {
        "id": b.id,
        "title": b.title,
        "author": b.author,
        "isbn": b.isbn,
        "category": b.category,
        "description": b.description,
        "total_copies": b.total_copies,
        "available_copies": b.available_copies,
        "created_at": _ts(b.created_at),
    }


def user_json(u) -> dict:
    return {"id": u.id, "name": u.name, "email": u.email, "role": u.role}


def record_json(r) -> dict:
    return {
        "id": r.id,
        "user_id": r.user_id,
        "book_id": r.book_id,
        "borrow_date": _ts(r.borrow_date),
        "due_date": _ts(r.due_date),
        "return_date": _ts(r.return_date),
        "status": r.status,
    }


def active_loan_json(r, book, now: datetime) -> dict:
    data = record_json(r)
    data["book"] = book_json(book)
    data["is_overdue"] = r.is_overdue(now)
    data["days_until_due"] = r.days_until_due(now)
    return data


def overdue_loan_json(r, book, user, now: datetime) -> dict:
    data = record_json(r)
    data["book"] = book_json(book)
    data["user"] = user_json(user)
    data["days_overdue"] = r.days_overdue(now)
    return data
