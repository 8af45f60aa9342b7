"""Auction bid endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from src.shuk_bidding.application.schemas import BidOut, PlaceBidRequest
from src.shuk_common.response import ApiResponse, result_response, success_response, with_request_id
from src.shuk_marketplace.container import Marketplace
from src.shuk_marketplace.dependencies import get_current_user_id, get_marketplace

router = APIRouter(prefix="/listings/{listing_id}", tags=["bids"])


@router.post("/bids")
async def place_bid(
    listing_id: str,
    body: PlaceBidRequest,
    user_id: Annotated[str, Depends(get_current_user_id)],
    market: Annotated[Marketplace, Depends(get_marketplace)],
    request: Request,
) -> JSONResponse:
    result = await market.bids.place_bid(listing_id, user_id, body.amount_cents)
    return result_response(result, request)


@router.get("/bids")
async def list_bids(
    listing_id: str,
    market: Annotated[Marketplace, Depends(get_marketplace)],
    request: Request,
) -> ApiResponse:
    bids = await market.bids.bids_by_listing(listing_id)
    data = [BidOut.from_domain(b).model_dump(mode="json") for b in bids]
    return with_request_id(success_response(data), request)
