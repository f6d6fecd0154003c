"""
salespath_admin/features/monitoring/reducers.py

Pure deterministic reducers for offer-monitoring stats.

The production path (service.py) computes the same counts in one grouped
SQL statement; reduce_business_stats is the per-object reference used as a
test oracle on small fixtures. Both finish through build_stats so the
derived fields (not_in_buy_box, plan_utilization) share one definition.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Iterable, Optional, Tuple

from salespath_admin.models.monitoring import MonitoringStats


class OfferState(str, Enum):
    UNMONITORED = "unmonitored"
    AT_FLOOR = "at_floor"
    OPTIMIZABLE = "optimizable"


@dataclass(frozen=True)
class OfferFacts:
    """One monitored offer joined with its listing snapshot (if any)."""
    is_monitored: bool
    min_price: Optional[float] = None
    selling_price: Optional[float] = None  # None when the snapshot is missing
    in_buy_box: Optional[bool] = None
    last_monitored: Optional[datetime] = None


def floor_reached(min_price: Optional[float], selling_price: Optional[float]) -> bool:
    """
    True when a floor is set and the listing already sells at or below it.

    A zero floor or zero price counts as unset.
    """
    if not min_price or not selling_price:
        return False
    return selling_price <= min_price


def classify_offer(offer: OfferFacts) -> OfferState:
    if not offer.is_monitored:
        return OfferState.UNMONITORED
    if floor_reached(offer.min_price, offer.selling_price):
        return OfferState.AT_FLOOR
    return OfferState.OPTIMIZABLE


def plan_utilization(used_slots: int, max_offers: Optional[int]) -> float:
    """Percentage of the plan quota in use, clamped to [0, 100]."""
    if not max_offers or max_offers <= 0:
        return 0.0
    # Multiply first: 9 * 100 / 10 is exactly 90.0, 9 / 10 * 100 is not
    pct = (used_slots * 100) / max_offers
    return float(min(max(pct, 0.0), 100.0))


def build_stats(
    total_monitored: int,
    in_buy_box: int,
    reached_min_price: int,
    max_offers: Optional[int],
) -> MonitoringStats:
    total_monitored = total_monitored or 0
    in_buy_box = in_buy_box or 0
    reached_min_price = reached_min_price or 0
    return MonitoringStats(
        total_monitored=total_monitored,
        in_buy_box=in_buy_box,
        not_in_buy_box=max(total_monitored - in_buy_box, 0),
        reached_min_price=reached_min_price,
        plan_utilization=plan_utilization(total_monitored + reached_min_price, max_offers),
    )


def reduce_business_stats(
    offers: Iterable[OfferFacts],
    max_offers: Optional[int],
) -> Tuple[MonitoringStats, Optional[datetime]]:
    """
    Reduce one business's offers to (stats, last_activity).

    Pure function: same offers + same quota => identical output.
    """
    total_monitored = 0
    in_buy_box = 0
    reached_min_price = 0
    last_activity: Optional[datetime] = None

    for offer in offers:
        state = classify_offer(offer)
        if state is OfferState.AT_FLOOR:
            reached_min_price += 1
        elif state is OfferState.OPTIMIZABLE:
            total_monitored += 1
            if offer.in_buy_box:
                in_buy_box += 1
            if offer.last_monitored is not None and (
                last_activity is None or offer.last_monitored > last_activity
            ):
                last_activity = offer.last_monitored

    return build_stats(total_monitored, in_buy_box, reached_min_price, max_offers), last_activity
