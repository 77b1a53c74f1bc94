"""
Footprint aggregation engine: turns a user's logged entries into weekly or
monthly buckets and per-category breakdowns for charts.
"""

import calendar
import logging
from collections import defaultdict
from datetime import datetime, timedelta, timezone
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, Iterable, List, Optional, Tuple

from ectracc.core.errors import InvalidInputError, store_operation
from ectracc.services.footprint_store import to_utc_naive

logger = logging.getLogger(__name__)

PERIODS = ("weekly", "monthly")

# Default look-back per period: (days, months). History and breakdown
# deliberately use different windows.
HISTORY_WINDOWS = {"weekly": (30, 0), "monthly": (0, 12)}
BREAKDOWN_WINDOWS = {"weekly": (7, 0), "monthly": (0, 1)}


def subtract_months(d: datetime, months: int) -> datetime:
    """Step back whole calendar months, clamping the day to the target month."""
    month = d.month - 1 - months
    year = d.year + month // 12
    month = month % 12 + 1
    day = min(d.day, calendar.monthrange(year, month)[1])
    return d.replace(year=year, month=month, day=day)


def resolve_window(
    period: str,
    start_date: Optional[datetime],
    end_date: Optional[datetime],
    windows: Dict[str, Tuple[int, int]],
    now: Optional[datetime] = None,
) -> Tuple[datetime, datetime]:
    """Fill in a missing end (now) and start (end minus the period's look-back)."""
    if period not in windows:
        raise InvalidInputError(f"Unknown period: {period}")
    end = end_date or now or datetime.now(timezone.utc)
    if start_date:
        return start_date, end
    days, months = windows[period]
    start = subtract_months(end, months) if months else end - timedelta(days=days)
    return start, end


def bucket_key(logged_at: datetime, period: str) -> str:
    """Monday's ISO date for weekly buckets, ``YYYY-MM`` for monthly ones."""
    logged_at = to_utc_naive(logged_at)
    if period == "weekly":
        monday = logged_at.date() - timedelta(days=logged_at.weekday())
        return monday.isoformat()
    return f"{logged_at.year:04d}-{logged_at.month:02d}"


def round_carbon(value: float) -> float:
    """Two decimals, half up."""
    return float(Decimal(str(value)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def percentage_of(value: float, total: float) -> int:
    if total <= 0:
        return 0
    share = Decimal(str(value)) / Decimal(str(total)) * 100
    return int(share.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def aggregate_footprints(rows: Iterable[Any], period: str) -> List[Dict[str, Any]]:
    """
    Group entries into period buckets.

    Sums are accumulated at full precision and only rounded on output.
    Buckets come back ordered by key, which is chronological for both
    key formats.
    """
    buckets: Dict[str, Dict[str, Any]] = {}
    for row in rows:
        key = bucket_key(row.logged_at, period)
        bucket = buckets.get(key)
        if bucket is None:
            bucket = buckets[key] = {
                "period": key,
                "total_carbon": 0.0,
                "count": 0,
                "categories": defaultdict(float),
            }
        bucket["total_carbon"] += row.carbon_total
        bucket["count"] += 1
        bucket["categories"][row.category] += row.carbon_total

    return [
        {
            "period": key,
            "total_carbon": round_carbon(bucket["total_carbon"]),
            "count": bucket["count"],
            "categories": {c: round_carbon(v) for c, v in bucket["categories"].items()},
        }
        for key, bucket in sorted(buckets.items())
    ]


def summarize_categories(rows: Iterable[Any]) -> Dict[str, Any]:
    """Per-category totals with integer shares of the grand total."""
    totals: Dict[str, float] = defaultdict(float)
    for row in rows:
        totals[row.category] += row.carbon_total

    categories = [
        {"category": category, "value": round_carbon(total), "percentage": 0}
        for category, total in totals.items()
    ]
    total_carbon = sum(item["value"] for item in categories)
    for item in categories:
        item["percentage"] = percentage_of(item["value"], total_carbon)

    return {"categories": categories, "total_carbon": round_carbon(total_carbon)}


class FootprintService:
    """Stateless aggregation engine over an injected row store."""

    def __init__(self, store):
        self.store = store

    def track(self, user_id: str, entry: Dict[str, Any]) -> Dict[str, Any]:
        row = {
            "user_id": user_id,
            "product_barcode": entry.get("product_barcode"),
            "manual_item": entry.get("manual_item"),
            "amount": entry["amount"],
            "carbon_total": entry["carbon_total"],
            "category": entry["category"],
            "logged_at": entry.get("logged_at") or datetime.now(timezone.utc),
        }
        with store_operation("track"):
            footprint = self.store.insert(row)
        return footprint.to_dict()

    def history(
        self,
        user_id: str,
        period: str = "weekly",
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        page: int = 1,
        limit: int = 50,
        now: Optional[datetime] = None,
    ) -> Dict[str, Any]:
        """
        Bucketed history plus the raw rows of the requested page.

        Pagination applies to raw rows, so buckets only cover that page.
        """
        start, end = resolve_window(period, start_date, end_date, HISTORY_WINDOWS, now)
        offset = (page - 1) * limit
        with store_operation("history"):
            rows = self.store.query(user_id, start, end, offset=offset, limit=limit)
        logger.debug(f"History for {user_id}: {len(rows)} rows between {start} and {end}")

        return {
            "period": period,
            "start_date": start.isoformat(),
            "end_date": end.isoformat(),
            "aggregated": aggregate_footprints(rows, period),
            "raw_data": [row.to_dict() for row in rows],
        }

    def category_breakdown(
        self,
        user_id: str,
        period: str = "monthly",
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        now: Optional[datetime] = None,
    ) -> Dict[str, Any]:
        start, end = resolve_window(period, start_date, end_date, BREAKDOWN_WINDOWS, now)
        with store_operation("category_breakdown"):
            rows = self.store.query(user_id, start, end)

        return {
            "period": period,
            "start_date": start.isoformat(),
            "end_date": end.isoformat(),
            **summarize_categories(rows),
        }

    def list_goals(self, user_id: str) -> List[Dict[str, Any]]:
        with store_operation("goals"):
            goals = self.store.list_goals(user_id)
        return [goal.to_dict() for goal in goals]

    def upsert_goal(self, user_id: str, goal: Dict[str, Any]) -> Dict[str, Any]:
        with store_operation("goals"):
            saved = self.store.upsert_goal(user_id, goal)
        return saved.to_dict()
