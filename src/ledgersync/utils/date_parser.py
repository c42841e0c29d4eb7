"""Date parsing utilities."""

import re
from datetime import date, timedelta
from dateutil import parser as date_parser

# "2024年5月1日" as exported by Japanese banks
_KANJI_DATE = re.compile(r"^(\d{4})年(\d{1,2})月(\d{1,2})日$")


def parse_date(date_str: str) -> date:
    """Parse a date string into a date object.

    Supports:
    - ISO and slash dates: "2024-05-01", "2024/05/01"
    - Written dates understood by dateutil: "May 1, 2024"
    - Kanji dates: "2024年5月1日"
    - Relative dates: "today", "yesterday"

    Args:
        date_str: Date string in various formats

    Returns:
        Date object

    Raises:
        ValueError: If date string cannot be parsed
    """
    date_str = date_str.strip().lower()
    if not date_str:
        raise ValueError("Empty date string")

    today = date.today()
    if date_str == "today":
        return today
    if date_str == "yesterday":
        return today - timedelta(days=1)

    match = _KANJI_DATE.match(date_str)
    if match:
        year, month, day = (int(part) for part in match.groups())
        try:
            return date(year, month, day)
        except ValueError as e:
            raise ValueError(f"Could not parse date '{date_str}': {e}")

    try:
        dt = date_parser.parse(date_str, yearfirst=True)
        return dt.date()
    except (ValueError, OverflowError) as e:
        raise ValueError(f"Could not parse date '{date_str}': {e}")
