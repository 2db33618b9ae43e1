import uuid

from fastapi import APIRouter, Body, Depends

from app.core.deps import AuthorizationService
from app.schemas.user.social import CoinTransfer
from app.services.shares.wallets import WalletsService

router = APIRouter(tags=["Wallet"])


@router.get("/wallet")
async def get_wallet(
    authorization: AuthorizationService = Depends(AuthorizationService),
    wallets_service: WalletsService = Depends(WalletsService),
):
    user = await authorization.get_current_user()
    return await wallets_service.get_wallet_async(user.id)


@router.post("/premium/subscribe")
async def subscribe_premium(
    authorization: AuthorizationService = Depends(AuthorizationService),
    wallets_service: WalletsService = Depends(WalletsService),
):
    user = await authorization.get_current_user()
    return await wallets_service.subscribe_premium_async(user.id)


@router.post("/coins/send/{receiver_id}")
async def send_coins(
    receiver_id: uuid.UUID,
    schema: CoinTransfer = Body(...),
    authorization: AuthorizationService = Depends(AuthorizationService),
    wallets_service: WalletsService = Depends(WalletsService),
):
    user = await authorization.get_current_user()
    return await wallets_service.send_coins_async(user.id, receiver_id, schema.amount)
