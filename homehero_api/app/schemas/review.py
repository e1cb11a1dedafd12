"""
Pydantic schemas for service reviews.

Reviews are embedded in the service document.  A customer may review
a service once, and only after booking it.
"""

from datetime import datetime
from typing import Optional

from pydantic import Field, field_validator

from .base import CamelModel


class ReviewCreate(CamelModel):
    """Schema for submitting a review."""

    rating: float = Field(..., ge=1, le=5, description="Rating from 1 to 5", examples=[5])
    comment: Optional[str] = Field(None, description="Optional textual comment")
    user_name: Optional[str] = Field(None, description="Display name shown next to the review")

    @field_validator("comment")
    @classmethod
    def sanitize_comment(cls, v: Optional[str]) -> Optional[str]:
        """Trim whitespace from the comment and enforce a maximum length."""
        if v is None:
            return None
        v = v.strip()
        if len(v) > 1000:
            raise ValueError("Comment must be 1000 characters or fewer")
        return v


class ReviewRead(CamelModel):
    """A review as embedded in a service document."""

    user_email: str
    user_name: str = "Anonymous"
    rating: float
    comment: Optional[str] = None
    date: datetime


class ReviewResult(CamelModel):
    """Response of the add-review endpoint."""

    success: bool = True
    message: str = "Review added successfully"
    average_rating: float
