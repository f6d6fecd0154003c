"""
salespath_admin/models/dashboard.py

Dashboard card counters.
"""

from datetime import datetime
from typing import List, Optional

from salespath_admin.models.base import CamelModel
from salespath_admin.models.subscription import NameOnly


class SubscriptionChange(CamelModel):
    business: Optional[NameOnly] = None
    status: str
    updated_at: datetime


class DashboardStats(CamelModel):
    user_count: int = 0
    business_count: int = 0
    offer_count: int = 0
    monitored_offer_count: int = 0
    active_business_count: int = 0
    trial_business_count: int = 0
    inactive_business_count: int = 0
    recent_subscription_changes: List[SubscriptionChange] = []


class DashboardStatsResponse(CamelModel):
    stats: DashboardStats
