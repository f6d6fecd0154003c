"""
salespath_admin/features/users/service.py

Admin user list with owned businesses.

Two queries in total (users, then their businesses), grouped in memory.
"""

from collections import defaultdict
from typing import Dict, List

from sqlalchemy import select
from sqlalchemy.orm import Session

from salespath_admin.core.database import businesses, subscriptions, users
from salespath_admin.models.business import SubscriptionStatusOnly
from salespath_admin.models.user import OwnedBusiness, UserListItem


def list_users(session: Session) -> List[UserListItem]:
    user_rows = session.execute(
        select(users.c.id, users.c.email, users.c.name, users.c.email_verified)
        .order_by(users.c.created_at.desc(), users.c.id.desc())
    ).all()

    business_rows = session.execute(
        select(
            businesses.c.id,
            businesses.c.name,
            businesses.c.owner_id,
            subscriptions.c.status.label("subscription_status"),
        )
        .select_from(
            businesses.outerjoin(subscriptions, subscriptions.c.business_id == businesses.c.id)
        )
        .order_by(businesses.c.created_at.desc(), businesses.c.id.desc())
    ).all()

    owned: Dict[str, List[OwnedBusiness]] = defaultdict(list)
    for row in business_rows:
        owned[row.owner_id].append(
            OwnedBusiness(
                id=row.id,
                name=row.name,
                subscription=(
                    SubscriptionStatusOnly(status=row.subscription_status)
                    if row.subscription_status is not None
                    else None
                ),
            )
        )

    return [
        UserListItem(
            id=row.id,
            email=row.email,
            name=row.name,
            email_verified=row.email_verified,
            owned_businesses=owned.get(row.id, []),
        )
        for row in user_rows
    ]
