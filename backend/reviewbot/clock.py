import time
from datetime import datetime, timedelta
from zoneinfo import ZoneInfo

from reviewbot.config import settings

TIME_ZONE = ZoneInfo(settings.timezone)

monotonic = time.monotonic


def now() -> datetime:
    return datetime.now(TIME_ZONE)


START_TIME = now()


def uptime() -> timedelta:
    return now() - START_TIME
