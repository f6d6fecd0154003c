"""
Admin business management router.
"""

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from salespath_admin.core.admin_auth import AdminActor, require_admin
from salespath_admin.core.database import get_db
from salespath_admin.core.logging import log_event
from salespath_admin.features.businesses import service
from salespath_admin.models.business import (
    AdjustOffersRequest,
    AdjustOffersResult,
    BusinessDeleteResult,
    BusinessDetail,
    BusinessListItem,
    BusinessUpdateRequest,
    BusinessUpdateResult,
)

router = APIRouter(prefix="/admin/businesses", tags=["businesses"])


@router.get("", response_model=List[BusinessListItem])
def list_businesses(
    actor: AdminActor = Depends(require_admin),
    session: Session = Depends(get_db),
):
    return service.list_businesses(session)


@router.get("/{business_id}", response_model=BusinessDetail)
def get_business(
    business_id: str,
    actor: AdminActor = Depends(require_admin),
    session: Session = Depends(get_db),
):
    return service.get_business(session, business_id)


@router.patch("/{business_id}", response_model=BusinessUpdateResult)
def update_business(
    business_id: str,
    req: BusinessUpdateRequest,
    actor: AdminActor = Depends(require_admin),
    session: Session = Depends(get_db),
):
    log_event(
        "info",
        "admin.business.update",
        actor_id=actor.actor_id,
        business_id=business_id,
        event_type="business_update",
    )
    return service.update_business(session, business_id, req.name, req.owner_email)


@router.delete("/{business_id}", response_model=BusinessDeleteResult)
def delete_business(
    business_id: str,
    actor: AdminActor = Depends(require_admin),
    session: Session = Depends(get_db),
):
    log_event(
        "warning",
        "admin.business.delete",
        actor_id=actor.actor_id,
        business_id=business_id,
        event_type="business_delete",
    )
    return service.delete_business(session, business_id)


@router.post("/{business_id}/adjust-offers", response_model=AdjustOffersResult)
def adjust_offers(
    business_id: str,
    req: AdjustOffersRequest,
    actor: AdminActor = Depends(require_admin),
    session: Session = Depends(get_db),
):
    """Unmonitor the oldest offers until at most maxOffers remain monitored."""
    return service.adjust_monitored_offers(session, business_id, req.max_offers)
