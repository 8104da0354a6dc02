"""Business directory endpoints."""

import logging
from typing import Annotated

from fastapi import APIRouter, HTTPException, Query, status

from bizdir.models.business import Business
from bizdir.schemas.business import (
    BulkCreateRequest,
    BusinessCreate,
    BusinessRead,
    BusinessUpdate,
    DeleteResponse,
)
from bizdir.services.auth import Store
from bizdir.services.filters import distinct_cities, distinct_tags, filter_businesses

logger = logging.getLogger(__name__)

router = APIRouter()


def _not_found(business_id: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=f"Business with ID {business_id} not found",
    )


def _to_read(business: Business) -> BusinessRead:
    return BusinessRead.model_validate(business)


@router.get("", response_model=list[BusinessRead])
async def list_businesses(
    store: Store,
    search: Annotated[str | None, Query(description="Text searched in all fields and tags")] = None,
    tag: Annotated[list[str] | None, Query(description="Required tag, repeatable")] = None,
    city: Annotated[str | None, Query(description="City name")] = None,
    zipcode: Annotated[str | None, Query(description="Zipcode prefix")] = None,
    active: Annotated[bool | None, Query(description="Active flag")] = None,
) -> list[BusinessRead]:
    """List businesses, optionally filtered.

    Without filters every business is returned in store order.
    """
    businesses = await store.list_all()
    if any(v is not None for v in (search, tag, city, zipcode, active)):
        businesses = filter_businesses(
            businesses,
            search=search,
            tags=tag,
            city=city,
            zipcode=zipcode,
            active=active,
        )
    return [_to_read(b) for b in businesses]


@router.get("/tags", response_model=list[str])
async def list_tags(store: Store) -> list[str]:
    """List every tag in use."""
    return distinct_tags(await store.list_all())


@router.get("/cities", response_model=list[str])
async def list_cities(store: Store) -> list[str]:
    """List every city in use."""
    return distinct_cities(await store.list_all())


@router.post("/bulk", response_model=list[BusinessRead], status_code=status.HTTP_201_CREATED)
async def bulk_create_businesses(
    request: BulkCreateRequest,
    store: Store,
) -> list[BusinessRead]:
    """Create several businesses at once.

    The whole body is validated first; one invalid item rejects the request
    and nothing is stored.
    """
    created = await store.bulk_create(request.businesses)
    logger.info("Bulk created %d businesses", len(created))
    return [_to_read(b) for b in created]


@router.get("/{business_id}", response_model=BusinessRead)
async def get_business(business_id: str, store: Store) -> BusinessRead:
    """Get a business by ID."""
    business = await store.get(business_id)
    if business is None:
        raise _not_found(business_id)
    return _to_read(business)


@router.post("", response_model=BusinessRead, status_code=status.HTTP_201_CREATED)
async def create_business(data: BusinessCreate, store: Store) -> BusinessRead:
    """Create a business. The ID is generated by the server."""
    business = await store.create(data)
    logger.info("Created business %s", business.id)
    return _to_read(business)


@router.patch("/{business_id}", response_model=BusinessRead)
async def update_business(
    business_id: str,
    data: BusinessUpdate,
    store: Store,
) -> BusinessRead:
    """Update the fields present in the body; omitted fields keep their value."""
    business = await store.update(business_id, data.changes())
    if business is None:
        raise _not_found(business_id)
    return _to_read(business)


@router.delete("/{business_id}", response_model=DeleteResponse)
async def delete_business(business_id: str, store: Store) -> DeleteResponse:
    """Delete a business."""
    if not await store.delete(business_id):
        raise _not_found(business_id)
    logger.info("Deleted business %s", business_id)
    return DeleteResponse()
