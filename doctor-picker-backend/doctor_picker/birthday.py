"""
birthday.py
===========
Shapes free-text birthday input into DD/MM/YYYY as the patient types,
and derives the patient's age from it.
"""

import datetime
import re
from typing import Optional, Tuple

_NON_DIGITS = re.compile(r"\D")
_DAY_MONTH = re.compile(r"^(\d{2})(\d{1,2})")
_YEAR = re.compile(r"^(.{5})(\d+)")

MAX_DAY = 31
MAX_MONTH = 12


def normalize_birthday(raw: str, today: Optional[datetime.date] = None) -> str:
    """
    Rebuild the whole buffer on every keystroke.

    Non-digits are dropped, a slash goes after the day once a month digit
    follows, and a second slash after the month once a year digit follows.
    Day, month and year are clamped to 31, 12 and the current year.
    There is no calendar check: "31/02/2020" is kept as is.
    """
    year_now = (today or datetime.date.today()).year

    def day_month(match: "re.Match[str]") -> str:
        day, month = match.group(1), match.group(2)
        if int(day) > MAX_DAY:
            day = str(MAX_DAY)
        if int(month) > MAX_MONTH:
            month = str(MAX_MONTH)
        return f"{day}/{month}"

    def year(match: "re.Match[str]") -> str:
        prefix, value = match.group(1), match.group(2)
        if int(value) > year_now:
            value = str(year_now)
        return f"{prefix}/{value}"

    digits = _NON_DIGITS.sub("", raw or "")
    shaped = _DAY_MONTH.sub(day_month, digits, count=1)
    return _YEAR.sub(year, shaped, count=1)


def _split(text: str) -> Tuple[int, int, int]:
    parts = text.split("/")
    if len(parts) != 3 or not all(p.isdigit() for p in parts) or len(parts[2]) != 4:
        raise ValueError(f"Birthday is not in DD/MM/YYYY form: {text!r}")
    day, month, year = (int(p) for p in parts)
    return day, month, year


def age_in_years(text: str, today: Optional[datetime.date] = None) -> int:
    """
    Whole years elapsed since a DD/MM/YYYY birthday.
    Raises ValueError if the text can't be split into day, month and year.
    """
    today = today or datetime.date.today()
    day, month, year = _split(text)

    age = today.year - year
    if today.month < month:
        age -= 1
    elif today.month == month and today.day < day:
        age -= 1
    return age


def try_age_in_years(text: str, today: Optional[datetime.date] = None) -> Optional[int]:
    """Like age_in_years, but None for empty or incomplete input."""
    if not text:
        return None
    try:
        return age_in_years(text, today)
    except ValueError:
        return None
