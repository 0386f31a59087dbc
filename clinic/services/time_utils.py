from datetime import date, datetime

NO_DATE = "No date"


def display_date(value, fmt: str) -> str:
    """
    Render a stored date for display.

    - Firestore timestamps (datetime) are formatted with ``fmt``
    - Strings are passed through untouched
    - Missing / empty values become NO_DATE
    """
    if isinstance(value, datetime):
        return value.astimezone().strftime(fmt) if value.tzinfo else value.strftime(fmt)
    if isinstance(value, date):
        return value.strftime(fmt)
    if value:
        return str(value)
    return NO_DATE


def parse_date(value, fmt: str):
    """
    Best-effort parse used for client-side ordering.
    Accepts datetime, "YYYY-MM-DD" (form input) and ``fmt`` strings.
    Returns a naive datetime or None if nothing matches.
    """
    if isinstance(value, datetime):
        return value.replace(tzinfo=None)
    if isinstance(value, date):
        return datetime.combine(value, datetime.min.time())
    if not isinstance(value, str) or not value.strip():
        return None

    text = value.strip()
    try:
        return datetime.fromisoformat(text).replace(tzinfo=None)
    except ValueError:
        pass
    try:
        return datetime.strptime(text, fmt)
    except ValueError:
        return None


def today_iso() -> str:
    return date.today().isoformat()


def now_hhmm() -> str:
    return datetime.now().strftime("%H:%M")


def format_elapsed(seconds: int) -> str:
    """HH:MM:SS, zero padded, hours unbounded."""
    h = seconds // 3600
    m = (seconds % 3600) // 60
    s = seconds % 60
    return f"{h:02d}:{m:02d}:{s:02d}"
