"""
salespath_admin/features/subscriptions/service.py

Subscription listing and manual status overrides for support staff.
"""

import logging
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from salespath_admin.core.database import (
    SUBSCRIPTION_STATUSES,
    businesses,
    plans,
    subscriptions,
)
from salespath_admin.core.errors import NotFoundError, ValidationError
from salespath_admin.models.subscription import NameOnly, SubscriptionListItem

logger = logging.getLogger("salespath.subscriptions")


def _subscription_query():
    return (
        select(
            subscriptions,
            businesses.c.name.label("business_name"),
            plans.c.name.label("plan_name"),
        )
        .select_from(
            subscriptions
            .outerjoin(businesses, businesses.c.id == subscriptions.c.business_id)
            .outerjoin(plans, plans.c.id == subscriptions.c.plan_id)
        )
    )


def _to_item(row) -> SubscriptionListItem:
    return SubscriptionListItem(
        id=row.id,
        business_id=row.business_id,
        status=row.status,
        start_date=row.start_date,
        next_billing_date=row.next_billing_date,
        trial_ends_at=row.trial_ends_at,
        created_at=row.created_at,
        updated_at=row.updated_at,
        business=NameOnly(name=row.business_name) if row.business_name is not None else None,
        plan=NameOnly(name=row.plan_name) if row.plan_name is not None else None,
    )


def list_subscriptions(session: Session) -> List[SubscriptionListItem]:
    rows = session.execute(
        _subscription_query().order_by(subscriptions.c.created_at.desc(), subscriptions.c.id.desc())
    ).all()
    return [_to_item(row) for row in rows]


def update_subscription(
    session: Session,
    subscription_id: str,
    status: str,
    next_billing_date: Optional[datetime] = None,
) -> SubscriptionListItem:
    """
    Override a subscription's status and next billing date.

    A null next_billing_date clears it.

    Raises:
        ValidationError: status outside SUBSCRIPTION_STATUSES
        NotFoundError: unknown subscription_id
    """
    if status not in SUBSCRIPTION_STATUSES:
        raise ValidationError("Invalid subscription status")

    result = session.execute(
        update(subscriptions)
        .where(subscriptions.c.id == subscription_id)
        .values(
            status=status,
            next_billing_date=next_billing_date,
            updated_at=datetime.now(timezone.utc),
        )
    )
    if result.rowcount == 0:
        session.rollback()
        raise NotFoundError("Subscription not found")
    session.commit()

    logger.info(f"[subscriptions] {subscription_id} -> {status}")
    row = session.execute(
        _subscription_query().where(subscriptions.c.id == subscription_id)
    ).one()
    return _to_item(row)
