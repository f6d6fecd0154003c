"""
salespath_admin/models/business.py

Business administration read and request models.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import Field

from salespath_admin.models.base import CamelModel
from salespath_admin.models.monitoring import OwnerSummary, SubscriptionSummary


class SubscriptionStatusOnly(CamelModel):
    status: str


class BusinessListItem(CamelModel):
    id: str
    name: str
    subscription: Optional[SubscriptionStatusOnly] = None
    owner: OwnerSummary


class BusinessCounts(CamelModel):
    monitored_offers: int = 0
    offer_snapshots: int = 0


class BusinessDetail(CamelModel):
    id: str
    name: str
    created_at: datetime
    owner: OwnerSummary
    subscription: Optional[SubscriptionSummary] = None
    counts: BusinessCounts


class BusinessUpdateRequest(CamelModel):
    name: Optional[str] = None
    owner_email: Optional[str] = None


class BusinessUpdateResult(CamelModel):
    message: str
    business: BusinessDetail


class DeletedCounts(CamelModel):
    monitored_offers: int = 0
    offer_snapshots: int = 0
    subscription: int = 0


class BusinessDeleteResult(CamelModel):
    message: str
    deleted_counts: DeletedCounts


class AdjustOffersRequest(CamelModel):
    max_offers: int = Field(..., description="Number of offers that may stay monitored")


class AdjustOffersResult(CamelModel):
    success: bool = True
    adjusted_count: int
    unmonitored_ids: List[str] = []
