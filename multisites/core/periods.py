"""MultiSites - Period Math.

Parses the date expressions accepted by the reports and derives the
comparable prior period used for evolution columns.

Accepted dates: YYYY-MM-DD, "today", "yesterday", "lastN", "previousN"
and "YYYY-MM-DD,YYYY-MM-DD".
"""

import calendar
import re
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from typing import List, Optional


PERIODS = ("day", "week", "month", "year", "range")

_LAST_N = re.compile(r"^(last|previous)(\d+)$")


class InvalidPeriod(ValueError):
    """Raised when a period or date expression cannot be understood."""


@dataclass(frozen=True)
class PriorPeriod:
    """The date expression of the previous comparable period."""

    date: str
    last_period: Optional[date] = None  # Only set when a single date was shifted


def _sub_months(d: date, months: int) -> date:
    month_index = d.year * 12 + (d.month - 1) - months
    year, month = divmod(month_index, 12)
    month += 1
    day = min(d.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


class PeriodMath:
    """Date arithmetic for report periods."""

    def __init__(self, today: Optional[date] = None):
        self._today = today

    @property
    def today(self) -> date:
        return self._today or datetime.now(timezone.utc).date()

    # ── Parsing ──

    def check_period(self, period: str) -> str:
        if period not in PERIODS:
            raise InvalidPeriod(f"Unknown period '{period}'")
        return period

    def parse_date(self, value: str) -> date:
        """Parse a single date keyword or YYYY-MM-DD string."""
        value = (value or "").strip()
        if value == "today":
            return self.today
        if value == "yesterday":
            return self.today - timedelta(days=1)
        try:
            return datetime.strptime(value, "%Y-%m-%d").date()
        except ValueError:
            raise InvalidPeriod(f"Invalid date '{value}'") from None

    def is_multi_period(self, period: str, date_expr: str) -> bool:
        """True when the expression covers several periods of the given type."""
        self.check_period(period)
        if period == "range":
            return False
        return "," in date_expr or bool(_LAST_N.match(date_expr.strip()))

    # ── Arithmetic ──

    def period_start(self, period: str, d: date) -> date:
        """First day of the period that contains `d`."""
        if period == "week":
            return d - timedelta(days=d.weekday())
        if period == "month":
            return d.replace(day=1)
        if period == "year":
            return d.replace(month=1, day=1)
        return d

    def sub_period(self, period: str, d: date, count: int = 1) -> date:
        """Shift a date back by `count` periods."""
        if period == "day":
            return d - timedelta(days=count)
        if period == "week":
            return d - timedelta(weeks=count)
        if period == "month":
            return _sub_months(d, count)
        if period == "year":
            return _sub_months(d, 12 * count)
        raise InvalidPeriod(f"Cannot shift a '{period}' period")

    def expand(self, period: str, date_expr: str) -> List[str]:
        """Return the period keys (period start dates) a date expression covers.

        A "range" period is a single archive keyed by its "start,end" text.
        """
        self.check_period(period)
        date_expr = (date_expr or "").strip()

        if period == "range":
            start, end = self._split_range(date_expr)
            return [f"{start.isoformat()},{end.isoformat()}"]

        match = _LAST_N.match(date_expr)
        if match:
            count = int(match.group(2))
            if count < 1:
                raise InvalidPeriod(f"Invalid date '{date_expr}'")
            end = self.period_start(period, self.today)
            if match.group(1) == "previous":
                end = self.sub_period(period, end)
            starts = [self.sub_period(period, end, n) for n in range(count - 1, -1, -1)]
            return [self.period_start(period, s).isoformat() for s in starts]

        if "," in date_expr:
            start, end = self._split_range(date_expr)
            keys: List[str] = []
            current = self.period_start(period, end)
            first = self.period_start(period, start)
            while current >= first:
                keys.append(current.isoformat())
                current = self.period_start(period, self.sub_period(period, current))
            return list(reversed(keys))

        return [self.period_start(period, self.parse_date(date_expr)).isoformat()]

    def prior_period(self, period: str, date_expr: str) -> Optional[PriorPeriod]:
        """Return the previous comparable period, or None when there is none.

        Ranges and lastN/previousN expressions have no single prior period.
        """
        self.check_period(period)
        date_expr = (date_expr or "").strip()
        if period == "range" or _LAST_N.search(date_expr):
            return None

        if "," in date_expr:
            start, end = self._split_range(date_expr)
            last_start = self.sub_period(period, start)
            last_end = self.sub_period(period, end)
            return PriorPeriod(date=f"{last_start.isoformat()},{last_end.isoformat()}")

        last = self.sub_period(period, self.parse_date(date_expr))
        return PriorPeriod(date=last.isoformat(), last_period=last)

    def _split_range(self, date_expr: str) -> tuple[date, date]:
        parts = [p.strip() for p in date_expr.split(",")]
        if len(parts) != 2:
            raise InvalidPeriod(f"Invalid date range '{date_expr}'")
        start, end = self.parse_date(parts[0]), self.parse_date(parts[1])
        if start > end:
            raise InvalidPeriod(f"Date range '{date_expr}' ends before it starts")
        return start, end
