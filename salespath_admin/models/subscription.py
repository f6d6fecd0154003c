"""
salespath_admin/models/subscription.py

Subscription and plan read models.
"""

from datetime import datetime
from typing import Optional

from salespath_admin.models.base import CamelModel


class NameOnly(CamelModel):
    name: str


class SubscriptionListItem(CamelModel):
    id: str
    business_id: str
    status: str
    start_date: Optional[datetime] = None
    next_billing_date: Optional[datetime] = None
    trial_ends_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime
    business: Optional[NameOnly] = None
    plan: Optional[NameOnly] = None


class SubscriptionUpdateRequest(CamelModel):
    status: str
    next_billing_date: Optional[datetime] = None


class Plan(CamelModel):
    """A subscription tier: how many offers a business may monitor, and its price."""
    id: str
    name: str
    max_offers: int
    price: float
    created_at: datetime
