"""
salespath_admin/models/email.py

Email broadcast request/response models.
"""

from typing import List, Literal

from pydantic import Field

from salespath_admin.models.base import CamelModel


class EmailBroadcastRequest(CamelModel):
    type: Literal["users", "businesses"] = "businesses"
    recipient_ids: List[str] = Field(default_factory=list)
    subject: str = Field(..., min_length=1)
    body: str = Field(..., min_length=1)


class EmailBroadcastResult(CamelModel):
    success: bool = True
    sent: int = 0
    skipped: int = 0
