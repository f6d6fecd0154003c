"""
Admin monitoring router.

GET /admin/businesses/monitoring returns the per-business monitoring
snapshot. Store failures surface as 503 (connection_error), 504
(timeout_error) or 500 (server_error) via the AppError handlers.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from salespath_admin.core.admin_auth import AdminActor, require_admin
from salespath_admin.features.monitoring.service import (
    MonitoringStatsAggregator,
    get_monitoring_aggregator,
)
from salespath_admin.models.monitoring import BusinessMonitoring

logger = logging.getLogger("salespath.api.monitoring")

router = APIRouter(prefix="/admin/businesses", tags=["monitoring"])


@router.get("/monitoring", response_model=List[BusinessMonitoring])
def business_monitoring(
    business_id: Optional[List[str]] = Query(None, description="Restrict to these business ids"),
    actor: AdminActor = Depends(require_admin),
    aggregator: MonitoringStatsAggregator = Depends(get_monitoring_aggregator),
):
    """Monitoring stats for every business, newest first."""
    logger.info(f"[monitoring] snapshot requested by {actor.actor_id}")
    return aggregator.aggregate(business_ids=business_id)
