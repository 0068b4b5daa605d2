import calendar
from datetime import datetime, timezone


def utcnow() -> datetime:
    """Naive UTC timestamp, matching how DateTime columns are stored."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def month_bucket(moment: datetime) -> str:
    """Monthly click bucket key, e.g. '2025-11'."""
    return f"{moment.year}-{moment.month:02d}"


def add_months(moment: datetime, months: int) -> datetime:
    month_index = moment.month - 1 + months
    year = moment.year + month_index // 12
    month = month_index % 12 + 1
    # Clamp to the last day of the target month (Aug 31 + 6 months -> Feb 28/29)
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)
