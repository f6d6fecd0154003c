"""
salespath_admin/models/monitoring.py

Read models for the per-business monitoring snapshot.

Optional relations are explicit: a business without a subscription has
`subscription=None`, an owner without a name has `name=None`. Owner email is
the one exception: it is always a string ("" when absent) because the
dashboard runs case-insensitive substring search over it.
"""

from datetime import datetime
from typing import Optional

from pydantic import field_validator

from salespath_admin.models.base import CamelModel


class OwnerSummary(CamelModel):
    id: str
    name: Optional[str] = None
    email: str = ""

    @field_validator("email", mode="before")
    @classmethod
    def _email_never_null(cls, value):
        return "" if value is None else value


class PlanSummary(CamelModel):
    id: str
    name: str
    max_offers: int
    price: float


class SubscriptionSummary(CamelModel):
    id: str
    status: str
    start_date: Optional[datetime] = None
    next_billing_date: Optional[datetime] = None
    trial_ends_at: Optional[datetime] = None
    plan: Optional[PlanSummary] = None


class MonitoringStats(CamelModel):
    """
    Monitoring health of one business.

    total_monitored counts optimizable offers only (monitored, floor not
    reached). plan_utilization counts every monitored offer against the plan
    quota, floor-reached ones included.
    """
    total_monitored: int = 0
    in_buy_box: int = 0
    not_in_buy_box: int = 0
    reached_min_price: int = 0
    plan_utilization: float = 0.0


class BusinessMonitoring(CamelModel):
    id: str
    name: str
    owner: OwnerSummary
    subscription: Optional[SubscriptionSummary] = None
    created_at: datetime
    monitoring_stats: MonitoringStats
    last_activity: Optional[datetime] = None
