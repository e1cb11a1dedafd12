"""
Review endpoint.

Customers review a service they have booked.  Each accepted review
recomputes the service's average rating.
"""

from fastapi import APIRouter, Depends

from homehero_api.app.api.deps import get_review_service
from homehero_api.app.core.errors import translate_store_errors
from homehero_api.app.core.security import get_current_user
from homehero_api.app.schemas.review import ReviewCreate, ReviewResult
from homehero_api.app.services.review_service import ReviewService


router = APIRouter()


@router.post("/services/{service_id}/review", response_model=ReviewResult, summary="Review a service")
async def add_review(
    service_id: str,
    data: ReviewCreate,
    current_user: dict = Depends(get_current_user),
    reviews: ReviewService = Depends(get_review_service),
) -> ReviewResult:
    """Submit a review as the authenticated caller.

    403 without a pending or completed booking, 400 on a second review.
    """
    with translate_store_errors("Failed to add review"):
        return await reviews.add_review(service_id, data, current_user)
