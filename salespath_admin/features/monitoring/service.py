"""
salespath_admin/features/monitoring/service.py

Monitoring stats aggregation for the admin dashboard.

Computes, for every business, how many offers are being optimized, how many
sit at their floor price, buy-box coverage and plan utilization. The whole
rollup is one grouped SQL statement: a per-business subquery over
monitored_offers with conditional aggregates, joined to owner, subscription
and plan. No per-business round trips.

Failures are all-or-nothing and mapped to:
- ConnectionError (503): store unreachable or connection dropped
- TimeoutError (504): pool checkout, driver or statement timeout
- AggregationError (500): anything else
"""

import builtins
import logging
import time
from typing import Callable, Collection, List, Optional

from sqlalchemy import and_, case, func, not_, select, text
from sqlalchemy.exc import DBAPIError, OperationalError, TimeoutError as PoolTimeoutError
from sqlalchemy.orm import Session
from sqlalchemy.sql import Select

from salespath_admin.core.config import settings
from salespath_admin.core.database import (
    businesses,
    get_session_factory,
    monitored_offers,
    offer_snapshots,
)
from salespath_admin.core.errors import (
    AggregationError,
    AppError,
    ConnectionError,
    TimeoutError,
)
from salespath_admin.core.logging import latency_bucket_ms
from salespath_admin.features.mapping import (
    business_joins,
    owner_columns,
    owner_from_row,
    subscription_columns,
    subscription_from_row,
)
from salespath_admin.features.monitoring.reducers import build_stats
from salespath_admin.models.monitoring import BusinessMonitoring

logger = logging.getLogger("salespath.monitoring")

# SQLSTATE 57014 = query_canceled (statement_timeout on PostgreSQL)
_TIMEOUT_SQLSTATES = {"57014"}
_TIMEOUT_MARKERS = ("timeout", "timed out", "canceling statement")
# Failed connects (including connect timeouts) mean the store is unreachable
_CONNECT_MARKERS = ("could not connect", "connection to server", "timeout expired")


def _count_if(condition):
    return func.coalesce(func.sum(case((condition, 1), else_=0)), 0)


def _offer_conditions():
    """Return (at_floor, optimizable, in_buy_box) SQL predicates.

    Every nullable operand in at_floor is guarded by IS NOT NULL inside the
    same AND, so the predicate is never NULL and NOT(at_floor) is safe. A
    zero floor or zero price counts as unset.
    """
    mo = monitored_offers
    snap = offer_snapshots
    monitored = mo.c.is_monitored.is_(True)
    at_floor = and_(
        monitored,
        mo.c.min_price.is_not(None),
        mo.c.min_price != 0,
        snap.c.selling_price.is_not(None),
        snap.c.selling_price != 0,
        snap.c.selling_price <= mo.c.min_price,
    )
    optimizable = and_(monitored, not_(at_floor))
    in_buy_box = and_(optimizable, snap.c.in_buy_box.is_(True))
    return at_floor, optimizable, in_buy_box


def build_monitoring_query(business_ids: Optional[Collection[str]] = None) -> Select:
    """Build the single grouped statement behind aggregate()."""
    mo = monitored_offers
    at_floor, optimizable, in_buy_box = _offer_conditions()

    offer_stats = (
        select(
            mo.c.business_id.label("business_id"),
            _count_if(optimizable).label("total_monitored"),
            _count_if(in_buy_box).label("in_buy_box"),
            _count_if(at_floor).label("reached_min_price"),
            func.max(case((optimizable, mo.c.last_monitored))).label("last_activity"),
        )
        # Offers whose snapshot is missing still count, as "not at floor, not in buy box"
        .select_from(mo.outerjoin(offer_snapshots, offer_snapshots.c.id == mo.c.snapshot_id))
        .where(mo.c.is_monitored.is_(True))
        .group_by(mo.c.business_id)
    )
    if business_ids is not None:
        offer_stats = offer_stats.where(mo.c.business_id.in_(list(business_ids)))
    offer_stats = offer_stats.subquery("offer_stats")

    query = (
        select(
            businesses.c.id,
            businesses.c.name,
            businesses.c.created_at,
            *owner_columns(),
            *subscription_columns(),
            offer_stats.c.total_monitored,
            offer_stats.c.in_buy_box,
            offer_stats.c.reached_min_price,
            offer_stats.c.last_activity,
        )
        .select_from(
            business_joins().outerjoin(offer_stats, offer_stats.c.business_id == businesses.c.id)
        )
        .order_by(businesses.c.created_at.desc(), businesses.c.id.desc())
    )
    if business_ids is not None:
        query = query.where(businesses.c.id.in_(list(business_ids)))
    return query


def _row_to_record(row) -> BusinessMonitoring:
    subscription = subscription_from_row(row)
    plan = subscription.plan if subscription else None

    stats = build_stats(
        row.total_monitored or 0,
        row.in_buy_box or 0,
        row.reached_min_price or 0,
        plan.max_offers if plan else None,
    )

    return BusinessMonitoring(
        id=row.id,
        name=row.name,
        owner=owner_from_row(row),
        subscription=subscription,
        created_at=row.created_at,
        monitoring_stats=stats,
        last_activity=row.last_activity,
    )


def _is_timeout(exc: BaseException) -> bool:
    orig = getattr(exc, "orig", None) or exc
    sqlstate = getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)
    if sqlstate in _TIMEOUT_SQLSTATES:
        return True
    message = str(orig).lower()
    if any(marker in message for marker in _CONNECT_MARKERS):
        return False
    if isinstance(orig, builtins.TimeoutError):
        return True
    return any(marker in message for marker in _TIMEOUT_MARKERS)


def translate_store_error(exc: Exception) -> AppError:
    """Map a driver/pool failure onto the retryable-vs-fatal taxonomy."""
    if isinstance(exc, PoolTimeoutError):
        return TimeoutError("Database operation timed out. Please try again.")
    if isinstance(exc, DBAPIError):
        if isinstance(exc, OperationalError) and _is_timeout(exc):
            return TimeoutError("Database operation timed out. Please try again.")
        if exc.connection_invalidated or isinstance(exc, OperationalError):
            return ConnectionError("Cannot reach database server. Please check your connection.")
        return AggregationError("Failed to fetch business monitoring data")
    if isinstance(exc, builtins.TimeoutError):
        return TimeoutError("Database operation timed out. Please try again.")
    if isinstance(exc, builtins.ConnectionError):
        return ConnectionError("Cannot reach database server. Please check your connection.")
    return AggregationError("Failed to fetch business monitoring data")


class MonitoringStatsAggregator:
    """
    Read-only rollup of offer-monitoring health per business.

    The store is injected as a session factory so callers (and tests) decide
    which database it reads. Each aggregate() call opens its own session and
    re-reads current data; nothing is cached between calls.
    """

    def __init__(
        self,
        session_factory: Callable[[], Session],
        *,
        statement_timeout_ms: Optional[int] = None,
    ):
        self._session_factory = session_factory
        self._statement_timeout_ms = statement_timeout_ms

    def _apply_statement_timeout(self, session: Session) -> None:
        if not self._statement_timeout_ms:
            return
        if session.get_bind().dialect.name != "postgresql":
            return
        # SET LOCAL takes no bind parameters; the value is an int we control
        session.execute(text(f"SET LOCAL statement_timeout = {int(self._statement_timeout_ms)}"))

    def aggregate(self, business_ids: Optional[Collection[str]] = None) -> List[BusinessMonitoring]:
        """
        Compute the monitoring snapshot for all businesses (or only `business_ids`).

        Returns records ordered by business creation time, newest first.

        Raises:
            ConnectionError: store unreachable
            TimeoutError: store operation exceeded its deadline
            AggregationError: any other failure
        """
        if business_ids is not None and len(business_ids) == 0:
            return []

        start = time.perf_counter()
        try:
            with self._session_factory() as session:
                self._apply_statement_timeout(session)
                rows = session.execute(build_monitoring_query(business_ids)).all()
                records = [_row_to_record(row) for row in rows]
        except AppError:
            raise
        except Exception as exc:
            error = translate_store_error(exc)
            logger.error(
                f"[monitoring] aggregation failed: {type(exc).__name__}: {exc}",
                extra={"error_code": error.code},
            )
            raise error from exc

        duration_ms = (time.perf_counter() - start) * 1000
        logger.info(
            "monitoring.aggregate",
            extra={
                "business_count": len(records),
                "latency_bucket": latency_bucket_ms(duration_ms),
            },
        )
        return records


def get_monitoring_aggregator() -> MonitoringStatsAggregator:
    """FastAPI dependency: aggregator bound to the application's database."""
    return MonitoringStatsAggregator(
        get_session_factory(),
        statement_timeout_ms=settings.DB_STATEMENT_TIMEOUT_MS,
    )
