from datetime import date, datetime
from zoneinfo import ZoneInfo

from hrms.core.config import settings


def local_now() -> datetime:
    """
    Current wall-clock time in the configured timezone, as a naive datetime.
    Only the HTTP layer calls this; services take `now` as a parameter.
    """
    return datetime.now(ZoneInfo(settings.timezone)).replace(tzinfo=None)


def local_today() -> date:
    return local_now().date()


def to_local_naive(value: datetime) -> datetime:
    """Aware datetimes are converted to local wall time; naive ones are taken as local already."""
    if value.tzinfo is None:
        return value
    return value.astimezone(ZoneInfo(settings.timezone)).replace(tzinfo=None)
