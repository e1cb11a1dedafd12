"""
Pydantic models for listed services.

``ServiceCreate`` describes what a provider may send when listing a
service.  Rating and review data are not part of it; any such keys in
the request body are ignored.  ``ServiceUpdate`` carries a partial
patch where every field is optional and identifiers are not accepted.
``ServiceRead`` is the full document returned to clients, reviews
included.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import ConfigDict, Field

from .base import CamelModel
from .review import ReviewRead


class ServiceBase(CamelModel):
    service_name: str = Field(..., min_length=1, examples=["Deep Home Cleaning"])
    category: str = Field(..., min_length=1, examples=["Cleaning"])
    price: float = Field(..., ge=0, examples=[30])
    description: Optional[str] = Field(None, examples=["Three hours of kitchen and bathroom cleaning"])
    provider_name: Optional[str] = None
    image_url: Optional[str] = None


class ServiceCreate(ServiceBase):
    """Schema for listing a new service.

    ``provider_email`` defaults to the caller's verified email.
    """

    provider_email: Optional[str] = None


class ServiceUpdate(CamelModel):
    """Partial update of a service.

    Only the provided fields change.  ``_id``, ``providerEmail``,
    ``reviews`` and ``averageRating`` are not patchable and are dropped
    if present in the body.
    """

    model_config = ConfigDict(extra="ignore")

    service_name: Optional[str] = Field(None, min_length=1)
    category: Optional[str] = Field(None, min_length=1)
    price: Optional[float] = Field(None, ge=0)
    description: Optional[str] = None
    provider_name: Optional[str] = None
    image_url: Optional[str] = None


class ServiceRead(ServiceBase):
    """Schema for reading a service from the API."""

    id: str = Field(..., alias="_id")
    provider_email: str
    average_rating: float
    reviews: List[ReviewRead] = Field(default_factory=list)
    created_at: datetime
    updated_at: Optional[datetime] = None


class DeleteResult(CamelModel):
    """Outcome of a delete operation."""

    acknowledged: bool = True
    deleted_count: int
    deleted_bookings: Optional[int] = None
