"""Identity REST API. Users are created with a zero balance; money arrives via /wallet/deposit."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request

from src.shuk_common.errors import UserExistsError, UserNotFoundError
from src.shuk_common.response import ApiResponse, success_response, with_request_id
from src.shuk_identity.application.schemas import CreateUserRequest, UserOut
from src.shuk_identity.domain.models import User
from src.shuk_marketplace.container import Marketplace
from src.shuk_marketplace.dependencies import get_current_user_id, get_marketplace

router = APIRouter(prefix="/users", tags=["users"])


@router.post("", status_code=201)
async def create_user(
    body: CreateUserRequest,
    market: Annotated[Marketplace, Depends(get_marketplace)],
    request: Request,
) -> ApiResponse:
    if await market.identity.get_user(body.id) is not None:
        raise UserExistsError(body.id)
    user = market.identity.add_user(
        User(
            id=body.id,
            name=body.name,
            email=body.email,
            display_name=body.display_name,
            avatar_url=body.avatar_url,
        )
    )
    data = UserOut.from_domain(user).model_dump(mode="json")
    return with_request_id(success_response(data), request)


@router.get("/me")
async def get_me(
    user_id: Annotated[str, Depends(get_current_user_id)],
    market: Annotated[Marketplace, Depends(get_marketplace)],
    request: Request,
) -> ApiResponse:
    return await get_user(user_id, market, request)


@router.get("/{user_id}")
async def get_user(
    user_id: str,
    market: Annotated[Marketplace, Depends(get_marketplace)],
    request: Request,
) -> ApiResponse:
    user = await market.identity.get_user(user_id)
    if user is None:
        raise UserNotFoundError(user_id)
    data = UserOut.from_domain(user).model_dump(mode="json")
    return with_request_id(success_response(data), request)
