"""
salespath_admin/models/base.py

Shared pydantic base for API read models.

Fields are snake_case in Python and camelCase on the wire, matching the
dashboard's JSON contract.
"""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )
