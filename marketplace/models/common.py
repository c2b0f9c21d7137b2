"""Shared pieces of the entity read models."""

from pydantic import BaseModel, ConfigDict
from typing import Optional


class ReadModel(BaseModel):
    """
    Base for rows returned by the backend.

    Projections vary per query, so every field except ``id`` is optional and
    unknown columns are kept rather than rejected.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)


class LocationRef(ReadModel):
    """Joined governorate / city / district row."""

    id: str
    name_ar: Optional[str] = None
    name_en: Optional[str] = None
