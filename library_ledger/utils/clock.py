from datetime import datetime, timezone


def utcnow() -> datetime:
    """Naive UTC timestamp, the form every DateTime column is stored in."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def months_back(moment: datetime, months: int) -> datetime:
    """Same day-of-month ``months`` earlier, clamped to the month's last day."""
    total = moment.year * 12 + (moment.month - 1) - months
    year, month = divmod(total, 12)
    month += 1
    # last day of target month
    if month == 12:
        next_first = datetime(year + 1, 1, 1)
    else:
        next_first = datetime(year, month + 1, 1)
    last_day = (next_first - datetime(year, month, 1)).days
    return moment.replace(year=year, month=month, day=min(moment.day, last_day))
