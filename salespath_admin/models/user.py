"""
salespath_admin/models/user.py

User read models for the admin user list.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import field_validator

from salespath_admin.models.base import CamelModel
from salespath_admin.models.business import SubscriptionStatusOnly


class OwnedBusiness(CamelModel):
    id: str
    name: str
    subscription: Optional[SubscriptionStatusOnly] = None


class UserListItem(CamelModel):
    id: str
    email: str = ""
    name: Optional[str] = None
    email_verified: Optional[datetime] = None
    owned_businesses: List[OwnedBusiness] = []

    @field_validator("email", mode="before")
    @classmethod
    def _email_never_null(cls, value):
        return "" if value is None else value
