"""
Row builders for tests.

Each helper inserts one row through SQLAlchemy Core and returns its id.
Timestamps are naive UTC so they compare equal after a sqlite round trip.
"""

from datetime import datetime, timedelta
from typing import Optional
from uuid import uuid4

from sqlalchemy import insert

from salespath_admin.core.database import (
    businesses,
    monitored_offers,
    offer_snapshots,
    plans,
    subscriptions,
    users,
)

BASE_TIME = datetime(2024, 3, 1, 12, 0, 0)

# Distinguishes "no email given" from an explicit None
_GENERATED = object()


def _id() -> str:
    return str(uuid4())


def add_user(session, email=_GENERATED, name: Optional[str] = "Owner", **values) -> str:
    user_id = values.pop("id", None) or _id()
    if email is _GENERATED:
        email = f"{user_id}@example.com"
    session.execute(
        insert(users).values(id=user_id, email=email, name=name, created_at=BASE_TIME, **values)
    )
    session.commit()
    return user_id


def add_plan(session, name: str = "Growth", max_offers: int = 10, price: float = 499.0) -> str:
    plan_id = _id()
    session.execute(
        insert(plans).values(id=plan_id, name=name, max_offers=max_offers, price=price, created_at=BASE_TIME)
    )
    session.commit()
    return plan_id


def add_business(session, owner_id: str, name: str = "Acme Traders", created_at: Optional[datetime] = None) -> str:
    business_id = _id()
    session.execute(
        insert(businesses).values(
            id=business_id,
            name=name,
            owner_id=owner_id,
            created_at=created_at or BASE_TIME,
        )
    )
    session.commit()
    return business_id


def add_subscription(
    session,
    business_id: str,
    plan_id: str,
    status: str = "ACTIVE",
    updated_at: Optional[datetime] = None,
    **values,
) -> str:
    subscription_id = _id()
    session.execute(
        insert(subscriptions).values(
            id=subscription_id,
            business_id=business_id,
            plan_id=plan_id,
            status=status,
            start_date=BASE_TIME,
            next_billing_date=BASE_TIME + timedelta(days=30),
            created_at=BASE_TIME,
            updated_at=updated_at or BASE_TIME,
            **values,
        )
    )
    session.commit()
    return subscription_id


def add_offer(
    session,
    business_id: str,
    *,
    is_monitored: bool = True,
    min_price: Optional[float] = None,
    selling_price: Optional[float] = 100.0,
    in_buy_box: Optional[bool] = False,
    last_monitored: Optional[datetime] = None,
    created_at: Optional[datetime] = None,
    with_snapshot: bool = True,
) -> str:
    """Insert a monitored offer, with a listing snapshot unless with_snapshot=False."""
    snapshot_id = None
    if with_snapshot:
        snapshot_id = _id()
        session.execute(
            insert(offer_snapshots).values(
                id=snapshot_id,
                business_id=business_id,
                title="Listing",
                selling_price=selling_price,
                in_buy_box=in_buy_box,
                updated_at=BASE_TIME,
            )
        )

    offer_id = _id()
    session.execute(
        insert(monitored_offers).values(
            id=offer_id,
            business_id=business_id,
            snapshot_id=snapshot_id,
            is_monitored=is_monitored,
            min_price=min_price,
            last_monitored=last_monitored,
            created_at=created_at or BASE_TIME,
        )
    )
    session.commit()
    return offer_id
