from datetime import datetime, timedelta

from flask import current_app

from library_ledger.repositories.book_repo import BookRepo
from library_ledger.repositories.borrow_repo import BorrowRepo
from library_ledger.utils.clock import utcnow

PRIORITY_RANK = {"high": 0, "medium": 1, "low": 2}

DEFAULT_DUE_SOON_DAYS = 3
DEFAULT_LOW_STOCK_THRESHOLD = 2


def _plural(count: int, singular: str, plural: str) -> str:
    return f"{count} book{plural if count > 1 else singular}"


def _unit(count: int, singular: str, plural: str) -> str:
    return f"{count} {singular if count == 1 else plural}"


# (id, type, title, priority, message builder), in insertion order.
# Builders take the count and the window settings the counts were made with.
ALERTS = (
    ("overdue", "error", "Overdue Books", "high",
     lambda n, s: f"{_plural(n, ' is', 's are')} overdue and require immediate attention"),
    ("due-today", "warning", "Books Due Today", "medium",
     lambda n, s: f"{_plural(n, ' is', 's are')} due today"),
    ("due-soon", "info", "Books Due Soon", "low",
     lambda n, s: f"{_plural(n, ' is', 's are')} due within {_unit(s['due_soon_days'], 'day', 'days')}"),
    ("out-of-stock", "warning", "Out of Stock", "medium",
     lambda n, s: f"{_plural(n, ' is', 's are')} completely out of stock"),
    ("low-stock", "info", "Low Stock Alert", "low",
     lambda n, s: f"{_plural(n, ' has', 's have')} less than {_unit(s['low_stock_threshold'], 'copy', 'copies')} available"),
    ("recent-activity", "success", "Recent Activity", "low",
     lambda n, s: f"{_plural(n, ' was', 's were')} borrowed in the last 24 hours"),
)

COUNT_KEYS = {
    "overdue": "overdue_count",
    "due-today": "due_today_count",
    "due-soon": "due_soon_count",
    "out-of-stock": "out_of_stock_count",
    "low-stock": "low_stock_count",
    "recent-activity": "recent_borrow_count",
}


def derive_notifications(counts: dict,
                         due_soon_days: int = DEFAULT_DUE_SOON_DAYS,
                         low_stock_threshold: int = DEFAULT_LOW_STOCK_THRESHOLD) -> list[dict]:
    """Turn live counts into alerts, highest priority first.

    Zero or missing counts produce no alert; equal priorities keep the order
    of ``ALERTS``. ``due_soon_days`` and ``low_stock_threshold`` should be the
    values the counts were taken with so the texts describe the same window.
    """
    settings = {"due_soon_days": int(due_soon_days), "low_stock_threshold": int(low_stock_threshold)}
    alerts = []
    for alert_id, alert_type, title, priority, message in ALERTS:
        n = int(counts.get(COUNT_KEYS[alert_id]) or 0)
        if n <= 0:
            continue
        alerts.append({
            "id": alert_id,
            "type": alert_type,
            "title": title,
            "message": message(n, settings),
            "count": n,
            "priority": priority,
        })
    return sorted(alerts, key=lambda a: PRIORITY_RANK[a["priority"]])


class NotificationService:
    @staticmethod
    def _windows() -> tuple[int, int]:
        cfg = current_app.config
        return (
            int(cfg.get("DUE_SOON_DAYS", DEFAULT_DUE_SOON_DAYS)),
            int(cfg.get("LOW_STOCK_THRESHOLD", DEFAULT_LOW_STOCK_THRESHOLD)),
        )

    @staticmethod
    def live_counts(now: datetime | None = None) -> dict:
        now = now or utcnow()
        due_soon_days, low_stock = NotificationService._windows()

        return {
            "overdue_count": BorrowRepo.count_overdue(now),
            "due_today_count": BorrowRepo.count_due_between(now, now + timedelta(days=1)),
            "due_soon_count": BorrowRepo.count_due_between(now, now + timedelta(days=due_soon_days)),
            "low_stock_count": BookRepo.count_low_stock(low_stock),
            "out_of_stock_count": BookRepo.count_out_of_stock(),
            "recent_borrow_count": BorrowRepo.count_active_borrowed_since(now - timedelta(days=1)),
        }

    @staticmethod
    def notifications(now: datetime | None = None) -> list[dict]:
        counts = NotificationService.live_counts(now)
        due_soon_days, low_stock = NotificationService._windows()
        alerts = derive_notifications(counts, due_soon_days=due_soon_days, low_stock_threshold=low_stock)
        current_app.logger.debug(f"[notifications] counts={counts} alerts={len(alerts)}")
        return alerts
