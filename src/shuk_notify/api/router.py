"""Notification inbox endpoints for the calling user."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from src.shuk_common.response import ApiResponse, result_response, success_response, with_request_id
from src.shuk_marketplace.container import Marketplace
from src.shuk_marketplace.dependencies import get_current_user_id, get_marketplace
from src.shuk_notify.application.schemas import NotificationOut

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("")
async def list_notifications(
    user_id: Annotated[str, Depends(get_current_user_id)],
    market: Annotated[Marketplace, Depends(get_marketplace)],
    request: Request,
) -> ApiResponse:
    rows = await market.notifier.notifications_for(user_id)
    data = {
        "items": [NotificationOut.from_domain(n).model_dump(mode="json") for n in rows],
        "unread_count": sum(1 for n in rows if not n.is_read),
    }
    return with_request_id(success_response(data), request)


@router.post("/read-all")
async def mark_all_read(
    user_id: Annotated[str, Depends(get_current_user_id)],
    market: Annotated[Marketplace, Depends(get_marketplace)],
    request: Request,
) -> ApiResponse:
    changed = await market.notifier.mark_all_read(user_id)
    return with_request_id(success_response({"marked_read": changed}), request)


@router.post("/{notification_id}/read")
async def mark_read(
    notification_id: str,
    user_id: Annotated[str, Depends(get_current_user_id)],
    market: Annotated[Marketplace, Depends(get_marketplace)],
    request: Request,
) -> JSONResponse:
    return result_response(await market.notifier.mark_read(notification_id, user_id), request)
