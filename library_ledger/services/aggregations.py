"""Ledger aggregations used by the admin analytics view.

Each function takes plain sequences of books, users or borrow records (any
object with the matching attributes) plus the evaluation time, and returns
JSON-ready dicts. Empty input always produces zeroed or empty output.
"""
from collections import Counter, defaultdict
from datetime import datetime, timedelta

from library_ledger.models.borrow import BORROWED, RETURNED, SECONDS_PER_DAY
from library_ledger.models.user import ROLE_USER
from library_ledger.utils.clock import months_back


def category_analytics(books) -> list[dict]:
    groups = defaultdict(lambda: {"total_books": 0, "total_copies": 0, "available_copies": 0})
    for b in books:
        g = groups[b.category]
        g["total_books"] += 1
        g["total_copies"] += b.total_copies or 0
        g["available_copies"] += b.available_copies or 0

    rows = []
    for category, g in groups.items():
        borrowed = g["total_copies"] - g["available_copies"]
        rate = 0.0 if g["total_copies"] == 0 else borrowed / g["total_copies"] * 100
        rows.append({
            "category": category,
            "total_books": g["total_books"],
            "total_copies": g["total_copies"],
            "available_copies": g["available_copies"],
            "borrowed_copies": borrowed,
            "utilization_rate": rate,
        })

    rows.sort(key=lambda r: (-r["total_books"], r["category"]))
    return rows


def monthly_trends(records, now: datetime, months: int = 6) -> list[dict]:
    since = months_back(now, months)
    borrows = Counter()
    returns = Counter()
    for r in records:
        if r.borrow_date < since:
            continue
        key = (r.borrow_date.year, r.borrow_date.month)
        borrows[key] += 1
        if r.status == RETURNED:
            returns[key] += 1

    return [
        {"year": year, "month": month, "borrow_count": borrows[(year, month)], "return_count": returns[(year, month)]}
        for (year, month) in sorted(borrows)
    ]


def top_borrowed_books(records, books_by_id: dict, limit: int = 10) -> list[dict]:
    counts = Counter(r.book_id for r in records)

    # inner join: counts for books that no longer resolve are dropped
    joined = [(book_id, n) for book_id, n in counts.items() if book_id in books_by_id]
    joined.sort(key=lambda item: (-item[1], item[0]))

    rows = []
    for book_id, n in joined[:limit]:
        book = books_by_id[book_id]
        rows.append({
            "book_id": book_id,
            "title": book.title,
            "author": book.author,
            "category": book.category,
            "borrow_count": n,
        })
    return rows


def user_activity(users, records) -> dict:
    patrons = [u for u in users if u.role == ROLE_USER]
    if not patrons:
        return {"total_users": 0, "active_users": 0, "avg_borrows_per_user": 0}

    totals = Counter()
    active = Counter()
    for r in records:
        totals[r.user_id] += 1
        if r.status == BORROWED:
            active[r.user_id] += 1

    return {
        "total_users": len(patrons),
        "active_users": sum(1 for u in patrons if active[u.id] > 0),
        "avg_borrows_per_user": sum(totals[u.id] for u in patrons) / len(patrons),
    }


def daily_activity(records, now: datetime, days: int = 30) -> list[dict]:
    since = now - timedelta(days=days)
    counts = Counter(
        r.borrow_date.strftime("%Y-%m-%d") for r in records if r.borrow_date >= since
    )
    return [{"date": day, "borrow_count": counts[day]} for day in sorted(counts)]


def overdue_analysis(records, now: datetime) -> dict:
    days = [
        (now - r.due_date).total_seconds() / SECONDS_PER_DAY
        for r in records
        if r.status == BORROWED and r.due_date < now
    ]
    if not days:
        return {"total_overdue": 0, "avg_days_overdue": 0, "max_days_overdue": 0}

    return {
        "total_overdue": len(days),
        "avg_days_overdue": sum(days) / len(days),
        "max_days_overdue": max(days),
    }
