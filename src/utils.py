import logging
from datetime import date, datetime, time

from charset_normalizer import from_path

logger = logging.getLogger(__name__)

DATE_FORMAT = "%Y-%m-%d"
TIME_FORMATS = ("%H:%M", "%H:%M:%S")


def parse_date(value: str, fmt: str = DATE_FORMAT) -> date | None:
    if not isinstance(value, str) or not value.strip():
        return None
    try:
        return datetime.strptime(value.strip(), fmt).date()
    except ValueError:
        return None


def parse_time(value: str) -> time | None:
    if not isinstance(value, str) or not value.strip():
        return None
    for fmt in TIME_FORMATS:
        try:
            return datetime.strptime(value.strip(), fmt).time()
        except ValueError:
            continue
    return None


def format_date(value: date | None) -> str | None:
    return value.strftime(DATE_FORMAT) if value is not None else None


def format_time(value: time | None) -> str | None:
    return value.strftime("%H:%M") if value is not None else None


def detect_encoding(file_path: str) -> str:
    try:
        result = from_path(file_path).best()
        encoding = result.encoding if result else "utf-8"
    except Exception as error:
        logger.warning("Can not detect encoding for %s: %s", file_path, error)
        return "utf-8"
    return encoding
