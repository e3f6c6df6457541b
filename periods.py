import re
from dataclasses import dataclass, replace
from typing import Iterable, Optional, Protocol, Sequence, TypeVar

MONTH_RE = re.compile(r"^\d{4}-(0[1-9]|1[0-2])$")


class TimeBounded(Protocol):
    start_month: Optional[str]
    end_month: Optional[str]


C = TypeVar("C")


def month_key(year: int, month: int) -> str:
    return f"{year:04d}-{month:02d}"


def parse_month(value: str) -> tuple[int, int]:
    if not MONTH_RE.match(value):
        raise ValueError(f"Invalid month key: {value!r}")
    return int(value[:4]), int(value[5:7])


def add_months(month: str, count: int) -> str:
    year, mon = parse_month(month)
    total = year * 12 + (mon - 1) + count
    return month_key(total // 12, total % 12 + 1)


def calendar_month(month: str) -> int:
    return int(month[5:7])


def is_active(item: TimeBounded, month: str) -> bool:
    # YYYY-MM keys compare correctly as strings
    if item.start_month and month < item.start_month:
        return False
    if item.end_month and month > item.end_month:
        return False
    return True


def active_categories(categories: Iterable[C], month: str) -> list[C]:
    active: list[C] = []
    for category in categories:
        if not is_active(category, month):
            continue
        subcategories = tuple(
            sub for sub in category.subcategories if is_active(sub, month)
        )
        active.append(replace(category, subcategories=subcategories))
    return active


@dataclass(frozen=True)
class Period:
    slug: str
    year: Optional[int] = None
    start: Optional[str] = None
    end: Optional[str] = None

    def contains(self, month: str) -> bool:
        if self.slug == "year":
            return int(month[:4]) == self.year
        if self.slug == "range":
            return self.start <= month <= self.end
        return True

    def select(self, months: Sequence[str]) -> list[str]:
        return sorted(m for m in months if self.contains(m))


def resolve_period(
    period: Optional[str],
    *,
    year: Optional[int] = None,
    start: Optional[str] = None,
    end: Optional[str] = None,
) -> Period:
    if not period or period == "all":
        return Period("all")
    if period == "year":
        if year is None:
            raise ValueError("Year period requires a year")
        return Period("year", year=year)
    if period == "range":
        if not start or not end:
            raise ValueError("Range period requires start and end months")
        parse_month(start)
        parse_month(end)
        if start > end:
            raise ValueError("Start month must not be after end month")
        return Period("range", start=start, end=end)
    raise ValueError(f"Unknown period: {period}")
