# --- File: myroom/schemas/base.py ---
"""
Base schema classes with common configuration.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

__all__ = ["BaseSchema", "MessageResponse"]


class BaseSchema(BaseModel):
    """
    Base schema with common Pydantic configuration.

    Attributes are snake_case in Python and camelCase on the wire
    (``contactInfo``, ``isBooked``), matching the stored record layout.
    """

    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
        alias_generator=to_camel,
        use_enum_values=False,
        str_strip_whitespace=True,
    )


class MessageResponse(BaseSchema):
    """Plain confirmation shown to the user."""

    message: str
