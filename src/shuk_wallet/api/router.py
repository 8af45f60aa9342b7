"""Wallet REST API: balance, ledger, deposit/withdraw and buy-now."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse

from src.shuk_common.cents import cents_to_display
from src.shuk_common.response import ApiResponse, result_response, success_response, with_request_id
from src.shuk_marketplace.container import Marketplace
from src.shuk_marketplace.dependencies import get_current_user_id, get_marketplace
from src.shuk_wallet.application.schemas import AmountRequest, BalanceOut, TransactionOut

router = APIRouter(tags=["wallet"])


@router.get("/wallet/balance")
async def get_balance(
    user_id: Annotated[str, Depends(get_current_user_id)],
    market: Annotated[Marketplace, Depends(get_marketplace)],
    request: Request,
) -> ApiResponse:
    balance = await market.wallet.balance_of(user_id)
    data = BalanceOut(
        user_id=user_id, balance_cents=balance, balance_display=cents_to_display(balance)
    )
    return with_request_id(success_response(data.model_dump()), request)


@router.get("/wallet/transactions")
async def list_transactions(
    user_id: Annotated[str, Depends(get_current_user_id)],
    market: Annotated[Marketplace, Depends(get_marketplace)],
    request: Request,
    limit: int = Query(50, ge=1, le=500),
) -> ApiResponse:
    rows = (await market.wallet.transactions_for(user_id))[:limit]
    data = [TransactionOut.from_domain(tx).model_dump(mode="json") for tx in rows]
    return with_request_id(success_response(data), request)


@router.post("/wallet/deposit")
async def deposit(
    body: AmountRequest,
    user_id: Annotated[str, Depends(get_current_user_id)],
    market: Annotated[Marketplace, Depends(get_marketplace)],
    request: Request,
) -> JSONResponse:
    return result_response(await market.wallet.deposit_funds(user_id, body.amount_cents), request)


@router.post("/wallet/withdraw")
async def withdraw(
    body: AmountRequest,
    user_id: Annotated[str, Depends(get_current_user_id)],
    market: Annotated[Marketplace, Depends(get_marketplace)],
    request: Request,
) -> JSONResponse:
    return result_response(await market.wallet.withdraw_funds(user_id, body.amount_cents), request)


@router.post("/listings/{listing_id}/buy")
async def buy_now(
    listing_id: str,
    user_id: Annotated[str, Depends(get_current_user_id)],
    market: Annotated[Marketplace, Depends(get_marketplace)],
    request: Request,
) -> JSONResponse:
    return result_response(await market.wallet.buy_now(listing_id, user_id), request)
