"""Timed break endpoints: entries, host lifecycle, waitlist and live events."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from src.shuk_breaks.application.schemas import (
    BreakEntryOut,
    CompleteBreakRequest,
    LiveEventOut,
    PublishEventRequest,
    ScheduleBreakRequest,
)
from src.shuk_common.response import ApiResponse, result_response, success_response, with_request_id
from src.shuk_marketplace.container import Marketplace
from src.shuk_marketplace.dependencies import get_current_user_id, get_marketplace

router = APIRouter(prefix="/breaks", tags=["breaks"])

CurrentUser = Annotated[str, Depends(get_current_user_id)]
Market = Annotated[Marketplace, Depends(get_marketplace)]


@router.post("/{listing_id}/join")
async def join_break(
    listing_id: str, user_id: CurrentUser, market: Market, request: Request
) -> JSONResponse:
    return result_response(await market.breaks.join_break(listing_id, user_id), request)


@router.get("/{listing_id}/entries")
async def list_entries(listing_id: str, market: Market, request: Request) -> ApiResponse:
    entries = await market.breaks.entries_for(listing_id)
    data = [BreakEntryOut.from_domain(e).model_dump(mode="json") for e in entries]
    return with_request_id(success_response(data), request)


@router.delete("/entries/{entry_id}")
async def remove_entry(
    entry_id: str, user_id: CurrentUser, market: Market, request: Request
) -> JSONResponse:
    return result_response(await market.breaks.remove_break_entry(entry_id, user_id), request)


@router.post("/{listing_id}/schedule")
async def schedule_break(
    listing_id: str,
    body: ScheduleBreakRequest,
    user_id: CurrentUser,
    market: Market,
    request: Request,
) -> JSONResponse:
    result = await market.breaks.schedule_break(
        listing_id, user_id, body.scheduled_live_at, body.live_link
    )
    return result_response(result, request)


@router.post("/{listing_id}/start")
async def start_break(
    listing_id: str, user_id: CurrentUser, market: Market, request: Request
) -> JSONResponse:
    return result_response(await market.breaks.start_break(listing_id, user_id), request)


@router.post("/{listing_id}/complete")
async def complete_break(
    listing_id: str,
    body: CompleteBreakRequest,
    user_id: CurrentUser,
    market: Market,
    request: Request,
) -> JSONResponse:
    result = await market.breaks.complete_break(
        listing_id, user_id, body.results_media, body.results_notes
    )
    return result_response(result, request)


@router.post("/{listing_id}/cancel")
async def cancel_break(
    listing_id: str, user_id: CurrentUser, market: Market, request: Request
) -> JSONResponse:
    return result_response(await market.breaks.cancel_break(listing_id, user_id), request)


@router.post("/{listing_id}/waitlist")
async def join_waitlist(
    listing_id: str, user_id: CurrentUser, market: Market, request: Request
) -> JSONResponse:
    return result_response(await market.breaks.join_waitlist(listing_id, user_id), request)


@router.delete("/{listing_id}/waitlist")
async def leave_waitlist(
    listing_id: str, user_id: CurrentUser, market: Market, request: Request
) -> JSONResponse:
    return result_response(await market.breaks.leave_waitlist(listing_id, user_id), request)


@router.get("/{listing_id}/waitlist/position")
async def waitlist_position(
    listing_id: str, user_id: CurrentUser, market: Market, request: Request
) -> ApiResponse:
    position = await market.breaks.get_waitlist_position(listing_id, user_id)
    return with_request_id(success_response({"position": position}), request)


@router.get("/{listing_id}/events")
async def list_events(listing_id: str, market: Market, request: Request) -> ApiResponse:
    events = await market.breaks.live_events(listing_id)
    data = [LiveEventOut.from_domain(e).model_dump(mode="json") for e in events]
    return with_request_id(success_response(data), request)


@router.post("/{listing_id}/events")
async def publish_event(
    listing_id: str,
    body: PublishEventRequest,
    user_id: CurrentUser,
    market: Market,
    request: Request,
) -> JSONResponse:
    result = await market.breaks.publish_live_event(listing_id, user_id, body.type, body.payload)
    return result_response(result, request)
