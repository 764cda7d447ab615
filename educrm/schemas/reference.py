from __future__ import annotations

from pydantic import BaseModel


class ReferenceOption(BaseModel):
    """Selector entry: ``value`` is the entity id as a string."""

    value: str
    label: str
