"""Derived advertising metrics and report-row normalization.

Every ratio returns 0 when its denominator is 0. Summaries recompute ratios
from the summed totals rather than averaging per-row ratios.
"""
import math
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple


def ctr(clicks: float, impressions: float) -> float:
    return clicks / impressions if impressions > 0 else 0


def cpc(cost: float, clicks: float) -> float:
    return cost / clicks if clicks > 0 else 0


def acos(cost: float, sales: float) -> float:
    return cost / sales if sales > 0 else 0


def roas(sales: float, cost: float) -> float:
    return sales / cost if cost > 0 else 0


def cpa(cost: float, conversions: float) -> float:
    return cost / conversions if conversions > 0 else 0


def conversion_rate(conversions: float, clicks: float) -> float:
    return conversions / clicks if clicks > 0 else 0


class EntityLevel(str, Enum):
    """Granularity of a report; the value is the report type in the URL."""

    CAMPAIGN = "campaigns"
    AD_GROUP = "adGroups"
    KEYWORD = "keywords"
    PRODUCT_AD = "productAds"

    @classmethod
    def from_report_type(cls, report_type: str) -> Optional["EntityLevel"]:
        try:
            return cls(report_type)
        except ValueError:
            return None


# (id field, name field) per level, in lookup precedence order
ENTITY_FIELDS: Dict[EntityLevel, Tuple[str, str]] = {
    EntityLevel.CAMPAIGN: ("campaignId", "campaignName"),
    EntityLevel.AD_GROUP: ("adGroupId", "adGroupName"),
    EntityLevel.KEYWORD: ("keywordId", "keywordText"),
    EntityLevel.PRODUCT_AD: ("adId", "asin"),
}

SALES_FIELD = "attributedSales14d"
CONVERSIONS_FIELD = "attributedConversions14d"


@dataclass(frozen=True)
class ReportRow:
    """One downloaded row, tagged with the granularity of the report it came from."""

    level: Optional[EntityLevel]
    fields: Mapping[str, Any] = field(default_factory=dict)

    def get(self, key: str, default: Any = None) -> Any:
        value = self.fields.get(key)
        return default if value is None else value

    def _first(self, index: int) -> Any:
        for pair in ENTITY_FIELDS.values():
            value = self.fields.get(pair[index])
            if value not in (None, ""):
                return value
        return None

    def _pick(self, index: int) -> Any:
        if self.level is not None:
            value = self.fields.get(ENTITY_FIELDS[self.level][index])
            if value not in (None, ""):
                return value
        return self._first(index)

    @property
    def entity_id(self) -> Optional[str]:
        value = self._pick(0)
        return str(value) if value is not None else None

    @property
    def entity_name(self) -> Optional[str]:
        return self._pick(1)


def _round(value: float, places: int) -> float:
    """Round half up on the exact binary value of ``value`` (0.125 -> 0.13)."""
    if not value or not math.isfinite(value):
        return 0
    return float(Decimal(value).quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_UP))


def _number(value: Any) -> float:
    if value in (None, ""):
        return 0
    if isinstance(value, (int, float)):
        return value
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0
    return int(number) if number.is_integer() else number


def normalize_row(row: ReportRow) -> Dict[str, Any]:
    impressions = _number(row.get("impressions"))
    clicks = _number(row.get("clicks"))
    cost = _number(row.get("cost"))
    sales = _number(row.get(SALES_FIELD))
    conversions = _number(row.get(CONVERSIONS_FIELD))

    return {
        "entity_id": row.entity_id,
        "entity_name": row.entity_name,
        "date": row.get("date"),
        "impressions": impressions,
        "clicks": clicks,
        "cost": _round(cost, 2),
        "sales": _round(sales, 2),
        "orders": conversions,
        "ctr": _round(ctr(clicks, impressions), 4),
        "cpc": _round(cpc(cost, clicks), 2),
        "acos": _round(acos(cost, sales), 4),
        "roas": _round(roas(sales, cost), 2),
        "conversions": conversions,
    }


def normalize_rows(rows: Iterable[ReportRow]) -> List[Dict[str, Any]]:
    return [normalize_row(row) for row in rows]


def summarize(rows: Iterable[Mapping[str, Any]]) -> Dict[str, Any]:
    """Totals over normalized rows with overall ratios recomputed from the sums."""
    rows = list(rows)
    total_impressions = sum(r.get("impressions", 0) for r in rows)
    total_clicks = sum(r.get("clicks", 0) for r in rows)
    total_cost = _round(sum(r.get("cost", 0) for r in rows), 2)
    total_sales = _round(sum(r.get("sales", 0) for r in rows), 2)
    total_orders = sum(r.get("orders", 0) for r in rows)

    return {
        "total_impressions": total_impressions,
        "total_clicks": total_clicks,
        "total_cost": total_cost,
        "total_sales": total_sales,
        "total_orders": total_orders,
        "avg_ctr": _round(ctr(total_clicks, total_impressions), 4),
        "avg_cpc": _round(cpc(total_cost, total_clicks), 2),
        "overall_acos": _round(acos(total_cost, total_sales), 4),
        "overall_roas": _round(roas(total_sales, total_cost), 2),
    }
