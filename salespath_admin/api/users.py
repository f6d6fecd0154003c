"""
Admin users, dashboard and email broadcast routers.
"""

import logging
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from salespath_admin.core.admin_auth import AdminActor, require_admin
from salespath_admin.core.database import get_db
from salespath_admin.features.dashboard.service import get_dashboard_stats
from salespath_admin.features.email.service import EmailSender, get_email_sender, send_broadcast
from salespath_admin.features.users.service import list_users
from salespath_admin.models.dashboard import DashboardStatsResponse
from salespath_admin.models.email import EmailBroadcastRequest, EmailBroadcastResult
from salespath_admin.models.user import UserListItem

logger = logging.getLogger("salespath.api.users")

router = APIRouter(prefix="/admin", tags=["users"])


@router.get("/users", response_model=List[UserListItem])
def get_users(
    actor: AdminActor = Depends(require_admin),
    session: Session = Depends(get_db),
):
    return list_users(session)


@router.get("/dashboard/stats", response_model=DashboardStatsResponse)
def dashboard_stats(
    actor: AdminActor = Depends(require_admin),
    session: Session = Depends(get_db),
):
    return DashboardStatsResponse(stats=get_dashboard_stats(session))


@router.post("/email/send", response_model=EmailBroadcastResult)
def send_email(
    req: EmailBroadcastRequest,
    actor: AdminActor = Depends(require_admin),
    session: Session = Depends(get_db),
    sender: EmailSender = Depends(get_email_sender),
):
    logger.info(
        f"[email] broadcast to {len(req.recipient_ids)} {req.type} requested by {actor.actor_id}"
    )
    return send_broadcast(session, req, sender)
