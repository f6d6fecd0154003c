"""
salespath_admin/features/businesses/service.py

Business administration (list, inspect, rename/re-own, delete, quota trim).

All functions take the request's Session; writes commit on success and
roll back on failure.
"""

import logging
from typing import List

from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from salespath_admin.core.database import (
    businesses,
    monitored_offers,
    offer_snapshots,
    subscriptions,
    users,
)
from salespath_admin.core.errors import NotFoundError, ValidationError
from salespath_admin.features.mapping import (
    business_joins,
    owner_columns,
    owner_from_row,
    subscription_columns,
    subscription_from_row,
)
from salespath_admin.models.business import (
    AdjustOffersResult,
    BusinessCounts,
    BusinessDeleteResult,
    BusinessDetail,
    BusinessListItem,
    BusinessUpdateResult,
    DeletedCounts,
    SubscriptionStatusOnly,
)

logger = logging.getLogger("salespath.businesses")


def _count(table, business_id: str):
    return (
        select(func.count())
        .select_from(table)
        .where(table.c.business_id == business_id)
        .scalar_subquery()
    )


def list_businesses(session: Session) -> List[BusinessListItem]:
    """All businesses, newest first, with owner and subscription status."""
    rows = session.execute(
        select(
            businesses.c.id,
            businesses.c.name,
            *owner_columns(),
            subscriptions.c.status.label("subscription_status"),
        )
        .select_from(business_joins())
        .order_by(businesses.c.created_at.desc(), businesses.c.id.desc())
    ).all()

    return [
        BusinessListItem(
            id=row.id,
            name=row.name,
            owner=owner_from_row(row),
            subscription=(
                SubscriptionStatusOnly(status=row.subscription_status)
                if row.subscription_status is not None
                else None
            ),
        )
        for row in rows
    ]


def get_business(session: Session, business_id: str) -> BusinessDetail:
    """
    One business with owner, subscription + plan and dependent row counts.

    Raises:
        NotFoundError: unknown business_id
    """
    row = session.execute(
        select(
            businesses.c.id,
            businesses.c.name,
            businesses.c.created_at,
            *owner_columns(),
            *subscription_columns(),
            _count(monitored_offers, business_id).label("monitored_offer_count"),
            _count(offer_snapshots, business_id).label("offer_snapshot_count"),
        )
        .select_from(business_joins())
        .where(businesses.c.id == business_id)
    ).first()

    if row is None:
        raise NotFoundError("Business not found")

    return BusinessDetail(
        id=row.id,
        name=row.name,
        created_at=row.created_at,
        owner=owner_from_row(row),
        subscription=subscription_from_row(row),
        counts=BusinessCounts(
            monitored_offers=row.monitored_offer_count or 0,
            offer_snapshots=row.offer_snapshot_count or 0,
        ),
    )


def update_business(session: Session, business_id: str, name: str, owner_email: str) -> BusinessUpdateResult:
    """
    Rename a business and/or move it to another owner (looked up by email).

    Raises:
        ValidationError: missing name/email, unknown new owner, duplicate name for owner
        NotFoundError: unknown business_id
    """
    name = (name or "").strip()
    owner_email = (owner_email or "").strip()
    if not name:
        raise ValidationError("Business name is required")
    if not owner_email:
        raise ValidationError("Owner email is required")

    existing = session.execute(
        select(businesses.c.id, businesses.c.owner_id, users.c.email.label("owner_email"))
        .select_from(businesses.outerjoin(users, users.c.id == businesses.c.owner_id))
        .where(businesses.c.id == business_id)
    ).first()
    if existing is None:
        raise NotFoundError("Business not found")

    owner_id = existing.owner_id
    if owner_email.lower() != (existing.owner_email or "").lower():
        new_owner = session.execute(
            select(users.c.id).where(func.lower(users.c.email) == owner_email.lower())
        ).first()
        if new_owner is None:
            raise ValidationError(f"User with email {owner_email} not found")
        owner_id = new_owner.id

    try:
        session.execute(
            update(businesses)
            .where(businesses.c.id == business_id)
            .values(name=name, owner_id=owner_id)
        )
        session.commit()
    except IntegrityError:
        session.rollback()
        raise ValidationError("A business with this name already exists for this owner")

    logger.info(
        f"[businesses] updated {business_id}",
        extra={"business_id": business_id},
    )
    return BusinessUpdateResult(
        message="Business updated successfully",
        business=get_business(session, business_id),
    )


def delete_business(session: Session, business_id: str) -> BusinessDeleteResult:
    """
    Delete a business and its dependent rows in one transaction.

    Raises:
        NotFoundError: unknown business_id
    """
    exists = session.execute(
        select(businesses.c.id).where(businesses.c.id == business_id)
    ).first()
    if exists is None:
        raise NotFoundError("Business not found")

    try:
        # Children first; sqlite does not enforce ON DELETE CASCADE by default
        removed_offers = session.execute(
            delete(monitored_offers).where(monitored_offers.c.business_id == business_id)
        ).rowcount
        removed_snapshots = session.execute(
            delete(offer_snapshots).where(offer_snapshots.c.business_id == business_id)
        ).rowcount
        removed_subscription = session.execute(
            delete(subscriptions).where(subscriptions.c.business_id == business_id)
        ).rowcount
        session.execute(delete(businesses).where(businesses.c.id == business_id))
        session.commit()
    except Exception:
        session.rollback()
        raise

    logger.info(
        f"[businesses] deleted {business_id}",
        extra={"business_id": business_id},
    )
    return BusinessDeleteResult(
        message="Business deleted successfully",
        deleted_counts=DeletedCounts(
            monitored_offers=removed_offers or 0,
            offer_snapshots=removed_snapshots or 0,
            subscription=removed_subscription or 0,
        ),
    )


def adjust_monitored_offers(session: Session, business_id: str, max_offers: int) -> AdjustOffersResult:
    """
    Trim a business's monitored offers down to `max_offers`.

    The oldest monitored offers are switched off first. Used after a plan
    downgrade so monitoring fits the new quota.
    """
    if max_offers < 0:
        raise ValidationError("maxOffers must be zero or positive")

    offer_ids = session.execute(
        select(monitored_offers.c.id)
        .where(
            monitored_offers.c.business_id == business_id,
            monitored_offers.c.is_monitored.is_(True),
        )
        .order_by(monitored_offers.c.created_at.asc(), monitored_offers.c.id.asc())
    ).scalars().all()

    excess = len(offer_ids) - max_offers
    to_unmonitor = list(offer_ids[:excess]) if excess > 0 else []

    if to_unmonitor:
        try:
            session.execute(
                update(monitored_offers)
                .where(monitored_offers.c.id.in_(to_unmonitor))
                .values(is_monitored=False)
            )
            session.commit()
        except Exception:
            session.rollback()
            raise

    logger.info(
        f"[businesses] adjusted offers for {business_id}: unmonitored {len(to_unmonitor)}",
        extra={"business_id": business_id},
    )
    return AdjustOffersResult(adjusted_count=len(to_unmonitor), unmonitored_ids=to_unmonitor)
