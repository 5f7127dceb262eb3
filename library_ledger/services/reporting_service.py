from datetime import datetime

from flask import current_app

from library_ledger.repositories.book_repo import BookRepo
from library_ledger.repositories.borrow_repo import BorrowRepo
from library_ledger.repositories.user_repo import UserRepo
from library_ledger.models.user import ROLE_USER
from library_ledger.services import aggregations
from library_ledger.utils.clock import utcnow


class ReportingService:
    @staticmethod
    def analytics(now: datetime | None = None) -> dict:
        """All six admin views, recomputed from the current catalog and ledger."""
        now = now or utcnow()
        cfg = current_app.config

        books = BookRepo.list_all()
        records = BorrowRepo.list_all()
        users = UserRepo.list_by_role(ROLE_USER)

        result = {
            "category_analytics": aggregations.category_analytics(books),
            "monthly_trends": aggregations.monthly_trends(
                records, now, months=cfg.get("TREND_MONTHS", 6)
            ),
            "top_borrowed_books": aggregations.top_borrowed_books(
                records, {b.id: b for b in books}, limit=cfg.get("TOP_BORROWED_LIMIT", 10)
            ),
            "user_stats": aggregations.user_activity(users, records),
            "daily_activity": aggregations.daily_activity(
                records, now, days=cfg.get("DAILY_ACTIVITY_DAYS", 30)
            ),
            "overdue_analysis": aggregations.overdue_analysis(records, now),
        }

        current_app.logger.debug(
            f"[reporting] analytics books={len(books)} records={len(records)} users={len(users)}"
        )
        return result
