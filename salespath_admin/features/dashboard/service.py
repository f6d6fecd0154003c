"""
salespath_admin/features/dashboard/service.py

Counters for the admin landing page.
"""

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from salespath_admin.core.database import (
    businesses,
    monitored_offers,
    offer_snapshots,
    subscriptions,
    users,
)
from salespath_admin.models.dashboard import DashboardStats, SubscriptionChange
from salespath_admin.models.subscription import NameOnly

INACTIVE_STATUSES = ("EXPIRED", "CANCELLED", "PAST_DUE")
RECENT_CHANGES_LIMIT = 5


def _count(session: Session, table, *where) -> int:
    query = select(func.count()).select_from(table)
    if where:
        query = query.where(*where)
    return session.execute(query).scalar_one() or 0


def get_dashboard_stats(session: Session) -> DashboardStats:
    by_status = dict(
        session.execute(
            select(subscriptions.c.status, func.count()).group_by(subscriptions.c.status)
        ).all()
    )

    recent = session.execute(
        select(
            subscriptions.c.status,
            subscriptions.c.updated_at,
            businesses.c.name.label("business_name"),
        )
        .select_from(
            subscriptions.outerjoin(businesses, businesses.c.id == subscriptions.c.business_id)
        )
        .order_by(subscriptions.c.updated_at.desc(), subscriptions.c.id.desc())
        .limit(RECENT_CHANGES_LIMIT)
    ).all()

    return DashboardStats(
        user_count=_count(session, users),
        business_count=_count(session, businesses),
        offer_count=_count(session, offer_snapshots),
        monitored_offer_count=_count(session, monitored_offers, monitored_offers.c.is_monitored.is_(True)),
        active_business_count=by_status.get("ACTIVE", 0),
        trial_business_count=by_status.get("TRIAL", 0),
        inactive_business_count=sum(by_status.get(s, 0) for s in INACTIVE_STATUSES),
        recent_subscription_changes=[
            SubscriptionChange(
                business=NameOnly(name=row.business_name) if row.business_name is not None else None,
                status=row.status,
                updated_at=row.updated_at,
            )
            for row in recent
        ],
    )
