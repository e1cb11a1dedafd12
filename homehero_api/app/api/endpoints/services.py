"""
Service catalog endpoints.

Browsing (listing, single lookup, top-rated, categories) is public.
Listing one's own services and creating, patching or deleting a
service require a bearer token; the mutating routes also require the
``email`` query parameter to name the token's owner, and the service
to belong to them.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from homehero_api.app.api.deps import get_catalog_service
from homehero_api.app.core.errors import translate_store_errors
from homehero_api.app.core.security import get_current_user, require_email_match
from homehero_api.app.schemas.service import DeleteResult, ServiceCreate, ServiceRead, ServiceUpdate
from homehero_api.app.services.catalog_service import CatalogService


router = APIRouter()


@router.get("/services", response_model=List[ServiceRead], summary="Browse services")
async def list_services(
    limit: Optional[int] = Query(None, ge=0),
    category: Optional[str] = Query(None),
    min_price: Optional[float] = Query(None, alias="minPrice"),
    max_price: Optional[float] = Query(None, alias="maxPrice"),
    search: Optional[str] = Query(None),
    sort_by: Optional[str] = Query(None, alias="sortBy", description="price-asc, price-desc or rating-desc"),
    catalog: CatalogService = Depends(get_catalog_service),
) -> List[ServiceRead]:
    """List services with optional filters.

    - **category**: exact match; `all` means no filter.
    - **minPrice**, **maxPrice**: inclusive price bounds.
    - **search**: case-insensitive text in name, category or description.
    - **sortBy**: `price-asc`, `price-desc` or `rating-desc`.
    - **limit**: maximum number of results.
    """
    with translate_store_errors("Failed to fetch services"):
        return await catalog.list_services(
            category=category,
            min_price=min_price,
            max_price=max_price,
            search=search,
            sort_by=sort_by,
            limit=limit,
        )


@router.get("/services/{service_id}", response_model=ServiceRead, summary="Get one service")
async def get_service(
    service_id: str,
    catalog: CatalogService = Depends(get_catalog_service),
) -> ServiceRead:
    with translate_store_errors("Failed to fetch service"):
        return await catalog.get_service(service_id)


@router.get("/my-services", response_model=List[ServiceRead], summary="List my services")
async def list_my_services(
    email: str = Depends(require_email_match),
    catalog: CatalogService = Depends(get_catalog_service),
) -> List[ServiceRead]:
    with translate_store_errors("Failed to fetch services"):
        return await catalog.list_provider_services(email)


@router.post(
    "/services",
    response_model=ServiceRead,
    status_code=status.HTTP_201_CREATED,
    summary="List a new service",
)
async def create_service(
    data: ServiceCreate,
    current_user: dict = Depends(get_current_user),
    catalog: CatalogService = Depends(get_catalog_service),
) -> ServiceRead:
    """Create a service owned by the caller.

    Starts with an average rating of 4.5 and no reviews; rating or
    review fields in the body are ignored.
    """
    with translate_store_errors("Failed to add service"):
        return await catalog.create_service(data, current_user)


@router.patch("/services/{service_id}", response_model=ServiceRead, summary="Update my service")
async def update_service(
    service_id: str,
    updates: ServiceUpdate,
    email: str = Depends(require_email_match),
    catalog: CatalogService = Depends(get_catalog_service),
) -> ServiceRead:
    """Patch the supplied fields of a service owned by the caller."""
    with translate_store_errors("Failed to update service"):
        return await catalog.update_service(service_id, updates, email)


@router.delete("/services/{service_id}", response_model=DeleteResult, summary="Delete my service")
async def delete_service(
    service_id: str,
    email: str = Depends(require_email_match),
    catalog: CatalogService = Depends(get_catalog_service),
) -> DeleteResult:
    """Delete a service owned by the caller along with its bookings."""
    with translate_store_errors("Failed to delete service"):
        return await catalog.delete_service(service_id, email)


@router.get("/top-rated-services", response_model=List[ServiceRead], summary="Top rated services")
async def top_rated_services(catalog: CatalogService = Depends(get_catalog_service)) -> List[ServiceRead]:
    """Up to six services rated 4 or higher, best first."""
    with translate_store_errors("Failed to fetch top-rated services"):
        return await catalog.top_rated()


@router.get("/categories", response_model=List[str], summary="Distinct categories")
async def list_categories(catalog: CatalogService = Depends(get_catalog_service)) -> List[str]:
    with translate_store_errors("Failed to fetch categories"):
        return await catalog.list_categories()
