"""
salespath_admin/features/mapping.py

Column sets and row -> read-model mapping shared by the business views.

Queries select owner_columns() / subscription_columns() alongside their own
columns and rebuild the nested summaries with owner_from_row() /
subscription_from_row(). Both expect businesses LEFT JOIN users,
subscriptions and plans.
"""

from typing import List, Optional

from salespath_admin.core.database import businesses, plans, subscriptions, users
from salespath_admin.models.monitoring import OwnerSummary, PlanSummary, SubscriptionSummary


def owner_columns() -> List:
    return [
        businesses.c.owner_id,
        users.c.name.label("owner_name"),
        users.c.email.label("owner_email"),
    ]


def subscription_columns() -> List:
    return [
        subscriptions.c.id.label("subscription_id"),
        subscriptions.c.status.label("subscription_status"),
        subscriptions.c.start_date,
        subscriptions.c.next_billing_date,
        subscriptions.c.trial_ends_at,
        plans.c.id.label("plan_id"),
        plans.c.name.label("plan_name"),
        plans.c.max_offers,
        plans.c.price.label("plan_price"),
    ]


def business_joins():
    """businesses LEFT JOIN owner, subscription and plan."""
    return (
        businesses
        .outerjoin(users, users.c.id == businesses.c.owner_id)
        .outerjoin(subscriptions, subscriptions.c.business_id == businesses.c.id)
        .outerjoin(plans, plans.c.id == subscriptions.c.plan_id)
    )


def owner_from_row(row) -> OwnerSummary:
    return OwnerSummary(id=row.owner_id, name=row.owner_name, email=row.owner_email)


def subscription_from_row(row) -> Optional[SubscriptionSummary]:
    if row.subscription_id is None:
        return None

    plan = None
    if row.plan_id is not None:
        plan = PlanSummary(
            id=row.plan_id,
            name=row.plan_name,
            max_offers=row.max_offers or 0,
            price=row.plan_price or 0.0,
        )

    return SubscriptionSummary(
        id=row.subscription_id,
        status=row.subscription_status,
        start_date=row.start_date,
        next_billing_date=row.next_billing_date,
        trial_ends_at=row.trial_ends_at,
        plan=plan,
    )
