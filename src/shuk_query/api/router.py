"""Discovery endpoints. Filter state is kept per ``X-Session-Id`` in memory."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from fastapi.encoders import jsonable_encoder

from src.shuk_catalog.application.schemas import listings_payload
from src.shuk_common.enums import AppScope, SearchScope, SortOption
from src.shuk_common.response import ApiResponse, success_response, with_request_id
from src.shuk_marketplace.container import Marketplace
from src.shuk_marketplace.dependencies import get_marketplace, get_session_id
from src.shuk_query.application.schemas import SetFilterRequest, filter_state_payload

router = APIRouter(prefix="/discovery", tags=["discovery"])

Market = Annotated[Marketplace, Depends(get_marketplace)]
Session = Annotated[str, Depends(get_session_id)]


@router.get("/listings")
async def search_listings(
    market: Market,
    session_id: Session,
    request: Request,
    scope: AppScope = Query(AppScope.COMBINED),
    sort: SortOption = Query(SortOption.NEWEST),
) -> ApiResponse:
    listings = await market.discovery.search_session(session_id, scope, sort)
    return with_request_id(success_response(listings_payload(listings)), request)


@router.get("/filters")
async def get_filters(market: Market, session_id: Session, request: Request) -> ApiResponse:
    state = market.discovery.session(session_id).state
    return with_request_id(success_response(jsonable_encoder(filter_state_payload(state))), request)


@router.put("/filters/{key}")
async def set_filter(
    key: str,
    body: SetFilterRequest,
    market: Market,
    session_id: Session,
    request: Request,
) -> ApiResponse:
    state = market.discovery.set_filter(session_id, key, body.value)
    return with_request_id(success_response(jsonable_encoder(filter_state_payload(state))), request)


@router.delete("/filters")
async def reset_filters(market: Market, session_id: Session, request: Request) -> ApiResponse:
    state = market.discovery.reset_filters(session_id)
    return with_request_id(success_response(jsonable_encoder(filter_state_payload(state))), request)


@router.get("/suggestions")
async def suggestions(
    market: Market,
    request: Request,
    q: str = Query("", description="Partial search text"),
    scope: SearchScope = Query(SearchScope.ALL),
) -> ApiResponse:
    return with_request_id(success_response(await market.discovery.suggestions(scope, q)), request)
