"""Listing REST API: create, browse and seller verification."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request

from src.shuk_catalog.application.schemas import (
    CreateListingRequest,
    ListingOut,
    listings_payload,
)
from src.shuk_common.errors import ListingNotFoundError
from src.shuk_common.response import ApiResponse, success_response, with_request_id
from src.shuk_marketplace.container import Marketplace
from src.shuk_marketplace.dependencies import get_current_user_id, get_marketplace

router = APIRouter(prefix="/listings", tags=["listings"])


@router.post("", status_code=201)
async def create_listing(
    body: CreateListingRequest,
    user_id: Annotated[str, Depends(get_current_user_id)],
    market: Annotated[Marketplace, Depends(get_marketplace)],
    request: Request,
) -> ApiResponse:
    listing = await market.catalog.create(user_id, body.to_draft())
    data = ListingOut.from_domain(listing).model_dump(mode="json")
    return with_request_id(success_response(data, message="Listing created"), request)


@router.get("")
async def list_listings(
    market: Annotated[Marketplace, Depends(get_marketplace)],
    request: Request,
    seller_id: str | None = Query(None, description="Only this seller's listings"),
) -> ApiResponse:
    if seller_id:
        listings = await market.catalog.list_by_seller(seller_id)
    else:
        listings = await market.catalog.list_all()
    return with_request_id(success_response(listings_payload(listings)), request)


@router.get("/ending-soon")
async def ending_soon(
    market: Annotated[Marketplace, Depends(get_marketplace)],
    request: Request,
    limit: int = Query(10, ge=1, le=100),
) -> ApiResponse:
    listings = await market.catalog.ending_soon_auctions(limit)
    return with_request_id(success_response(listings_payload(listings)), request)


@router.get("/closing-breaks")
async def closing_breaks(
    market: Annotated[Marketplace, Depends(get_marketplace)],
    request: Request,
    limit: int = Query(10, ge=1, le=100),
) -> ApiResponse:
    listings = await market.catalog.closing_breaks(limit)
    return with_request_id(success_response(listings_payload(listings)), request)


@router.post("/sellers/me/verify")
async def verify_seller(
    user_id: Annotated[str, Depends(get_current_user_id)],
    market: Annotated[Marketplace, Depends(get_marketplace)],
    request: Request,
) -> ApiResponse:
    changed = await market.catalog.verify_seller_listings(user_id)
    return with_request_id(
        success_response({"listings_updated": changed}, message="Seller verified"), request
    )


@router.get("/{listing_id}")
async def get_listing(
    listing_id: str,
    market: Annotated[Marketplace, Depends(get_marketplace)],
    request: Request,
) -> ApiResponse:
    listing = await market.catalog.get(listing_id)
    if listing is None:
        raise ListingNotFoundError(listing_id)
    return with_request_id(
        success_response(ListingOut.from_domain(listing).model_dump(mode="json")), request
    )


@router.get("/{listing_id}/related")
async def related_listings(
    listing_id: str,
    market: Annotated[Marketplace, Depends(get_marketplace)],
    request: Request,
    limit: int = Query(4, ge=1, le=20),
) -> ApiResponse:
    listings = await market.catalog.related_listings(listing_id, limit)
    return with_request_id(success_response(listings_payload(listings)), request)
