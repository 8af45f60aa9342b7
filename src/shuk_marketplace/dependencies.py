"""FastAPI dependencies: the engine instance and the calling user.

There is no authentication layer; the caller identifies itself with the
``X-User-Id`` header and discovery sessions with ``X-Session-Id``.

Usage in any router:
    @router.post("/thing")
    async def thing(
        user_id: Annotated[str, Depends(get_current_user_id)],
        market: Annotated[Marketplace, Depends(get_marketplace)],
    ): ...
"""

from typing import Annotated

from fastapi import Header, Request

from src.shuk_common.errors import SignInRequiredError
from src.shuk_marketplace.container import Marketplace


def get_marketplace(request: Request) -> Marketplace:
    return request.app.state.marketplace


async def get_current_user_id(
    x_user_id: Annotated[str | None, Header()] = None,
) -> str:
    if not x_user_id or not x_user_id.strip():
        raise SignInRequiredError()
    return x_user_id.strip()


async def get_session_id(
    x_session_id: Annotated[str | None, Header()] = None,
    x_user_id: Annotated[str | None, Header()] = None,
) -> str:
    """Filter-session key: explicit session header, else the user, else anonymous."""
    return x_session_id or x_user_id or "anonymous"
