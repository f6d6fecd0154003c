"""
Admin subscription and plan routers.
"""

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from salespath_admin.core.admin_auth import AdminActor, require_admin
from salespath_admin.core.database import get_db
from salespath_admin.features.plans.service import list_plans
from salespath_admin.features.subscriptions.service import list_subscriptions, update_subscription
from salespath_admin.models.subscription import Plan, SubscriptionListItem, SubscriptionUpdateRequest

router = APIRouter(prefix="/admin", tags=["subscriptions"])


@router.get("/subscriptions", response_model=List[SubscriptionListItem])
def get_subscriptions(
    actor: AdminActor = Depends(require_admin),
    session: Session = Depends(get_db),
):
    return list_subscriptions(session)


@router.patch("/subscriptions/{subscription_id}", response_model=SubscriptionListItem)
def patch_subscription(
    subscription_id: str,
    req: SubscriptionUpdateRequest,
    actor: AdminActor = Depends(require_admin),
    session: Session = Depends(get_db),
):
    return update_subscription(session, subscription_id, req.status, req.next_billing_date)


@router.get("/plans", response_model=List[Plan])
def get_plans(
    actor: AdminActor = Depends(require_admin),
    session: Session = Depends(get_db),
):
    return list_plans(session)
