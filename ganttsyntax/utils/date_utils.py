"""
Day arithmetic, date templates and duration tokens used by the gantt syntax.

Dates are calendar dates (``datetime.date``) without a time component.
A date template is a string like ``YYYY-MM-DD`` or ``DD/MM/YYYY``. Only the
fixed width tokens ``YYYY``, ``MM`` and ``DD`` are understood; anything else
in the template is copied through unchanged when formatting.

PROMPT> python -m ganttsyntax.utils.date_utils
"""
import math
import re
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Iterable, Optional, Protocol, Union

DEFAULT_DATE_FORMAT = "YYYY-MM-DD"

# Token and its width in characters.
DATE_TOKENS: list[tuple[str, int]] = [
    ("YYYY", 4),
    ("MM", 2),
    ("DD", 2),
]

DURATION_REGEX = re.compile(r"^(\d+)(d|w|h)?$")

def add_days(d: date, days: int) -> date:
    return d + timedelta(days=days)

def start_of_day(d: Union[date, datetime]) -> date:
    """Drop the time component, if any."""
    if isinstance(d, datetime):
        return d.date()
    return d

def diff_days(start: date, end: date) -> int:
    """Number of days from start to end. Negative when end is before start."""
    return (start_of_day(end) - start_of_day(start)).days

class HasDateRange(Protocol):
    start_date: date
    end_date: date

def get_date_range(tasks: Iterable[HasDateRange], today: Optional[date] = None) -> tuple[date, date]:
    """
    The earliest start and the latest end of the tasks.
    Without tasks, a 30 day window starting today.
    """
    tasks = list(tasks)
    if not tasks:
        today = today or date.today()
        return today, add_days(today, 30)
    start = min(start_of_day(t.start_date) for t in tasks)
    end = max(start_of_day(t.end_date) for t in tasks)
    return start, end

@dataclass(frozen=True)
class DateTemplateSegment:
    token: str
    offset: int
    width: int

@dataclass(frozen=True)
class DateTemplate:
    """
    A date format string compiled into the positions of its tokens.

    The first occurrence of each token is used, same as when formatting.
    """
    template: str
    segments: tuple[DateTemplateSegment, ...]

    @classmethod
    def compile(cls, template: str) -> "DateTemplate":
        segments = []
        for token, width in DATE_TOKENS:
            offset = template.find(token)
            if offset >= 0:
                segments.append(DateTemplateSegment(token=token, offset=offset, width=width))
        segments.sort(key=lambda s: s.offset)
        return cls(template=template, segments=tuple(segments))

    def has_all_tokens(self) -> bool:
        return len(self.segments) == len(DATE_TOKENS)

    def format(self, d: date) -> str:
        values = {
            "YYYY": f"{d.year:04d}",
            "MM": f"{d.month:02d}",
            "DD": f"{d.day:02d}",
        }
        result = self.template
        for token, _ in DATE_TOKENS:
            result = result.replace(token, values[token], 1)
        return result

    def parse(self, text: str) -> Optional[date]:
        if not self.has_all_tokens():
            return None
        values: dict[str, int] = {}
        for segment in self.segments:
            piece = text[segment.offset:segment.offset + segment.width]
            if len(piece) != segment.width or not piece.isascii() or not piece.isdigit():
                return None
            values[segment.token] = int(piece)
        try:
            return date(values["YYYY"], values["MM"], values["DD"])
        except ValueError:
            # Month 13, February 30th, year 0.
            return None

def format_date(d: date, template: str = DEFAULT_DATE_FORMAT) -> str:
    return DateTemplate.compile(template).format(start_of_day(d))

def parse_date(text: str, template: str = DEFAULT_DATE_FORMAT) -> Optional[date]:
    """
    Parse text laid out like the template.

    Returns None when the template lacks one of YYYY, MM, DD, when a
    component isn't numeric, or when it isn't a real calendar date.
    """
    return DateTemplate.compile(template).parse(text)

def parse_duration(duration: str) -> int:
    """
    Duration token to a number of days.

    ``5d`` is 5 days, ``2w`` is 14 days, ``36h`` is rounded up to 2 days,
    a bare ``5`` is days. Anything that doesn't match yields 1 day.
    """
    match = DURATION_REGEX.match(duration)
    if match is None:
        return 1
    value = int(match.group(1))
    unit = match.group(2) or "d"
    if unit == "w":
        return value * 7
    if unit == "h":
        return math.ceil(value / 24)
    return value

if __name__ == "__main__":
    d = date(2024, 1, 31)
    print(f"add_days: {add_days(d, 1)}")
    print(f"format_date: {format_date(d, 'DD/MM/YYYY')}")
    print(f"parse_date: {parse_date('15/01/2024', 'DD/MM/YYYY')}")
    for token in ["5d", "2w", "36h", "7", "garbage"]:
        print(f"parse_duration({token!r}): {parse_duration(token)}")
