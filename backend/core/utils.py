"""Utility functions shared by the entity stores"""
from datetime import datetime, timezone as dt_timezone
from django.utils import timezone
from django.utils.dateparse import parse_date, parse_datetime
import time


def now_ms() -> int:
    """Current time in epoch milliseconds"""
    return int(time.time() * 1000)


def now_iso() -> str:
    """Current UTC time as an ISO-8601 string"""
    return timezone.now().isoformat()


def generate_id(existing_ids=()) -> str:
    """
    Generate a millisecond-timestamp id not present in existing_ids.

    Two ids minted in the same millisecond are bumped forward until unique.
    """
    existing = {str(i) for i in existing_ids}
    candidate = now_ms()
    while str(candidate) in existing:
        candidate += 1
    return str(candidate)


def parse_datetime_value(value):
    """
    Parse an ISO date/datetime string into an aware datetime.

    Returns None when the value is empty or unparseable.
    """
    if not value:
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        text = str(value).replace('Z', '+00:00')
        try:
            parsed = parse_datetime(text)
            if parsed is None:
                day = parse_date(text)
                if day is None:
                    return None
                parsed = datetime(day.year, day.month, day.day)
        except ValueError:
            return None
    if timezone.is_naive(parsed):
        parsed = parsed.replace(tzinfo=dt_timezone.utc)
    return parsed
