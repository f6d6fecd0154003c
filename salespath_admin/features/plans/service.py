"""
salespath_admin/features/plans/service.py

Plan catalogue (read-only for admins).
"""

from typing import List

from sqlalchemy import select
from sqlalchemy.orm import Session

from salespath_admin.core.database import plans
from salespath_admin.models.subscription import Plan


def list_plans(session: Session) -> List[Plan]:
    """All plans, cheapest first."""
    rows = session.execute(
        select(plans).order_by(plans.c.price.asc(), plans.c.id.asc())
    ).all()
    return [
        Plan(
            id=row.id,
            name=row.name,
            max_offers=row.max_offers,
            price=row.price,
            created_at=row.created_at,
        )
        for row in rows
    ]
