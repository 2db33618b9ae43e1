import uuid

from fastapi import Depends, HTTPException
from loguru import logger
from sqlalchemy import desc, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.enum import PaymentStatus, PaymentType
from app.core.exceptions import (
    BadRequestError,
    InsufficientCoinsError,
    InternalError,
    NotFoundError,
)
from app.core.settings import settings
from app.db.models.database import Messages, Payments, User
from app.db.session import get_session
from app.db.transaction import run_atomic


class WalletsService:
    """Every change to `User.coins` goes through debit_async / credit_async."""

    def __init__(self, db: AsyncSession = Depends(get_session)):
        self.db = db

    # ==============================
    # 💰 BALANCE PRIMITIVES
    # ==============================

    async def get_balance_async(self, user_id: uuid.UUID) -> int | None:
        return await self.db.scalar(select(User.coins).where(User.id == user_id))

    async def debit_async(self, user_id: uuid.UUID, amount: int) -> int:
        """Guarded debit; matches no row when the balance is short. Returns the new balance."""
        if amount <= 0:
            raise BadRequestError("Amount must be positive")

        result = await self.db.execute(
            update(User)
            .where(User.id == user_id, User.coins >= amount)
            .values(coins=User.coins - amount)
        )
        if result.rowcount != 1:
            current = await self.get_balance_async(user_id)
            if current is None:
                raise NotFoundError("User not found")
            raise InsufficientCoinsError(required=amount, current=current)

        return await self.get_balance_async(user_id)

    async def credit_async(self, user_id: uuid.UUID, amount: int) -> int:
        if amount <= 0:
            raise BadRequestError("Amount must be positive")

        result = await self.db.execute(
            update(User)
            .where(User.id == user_id)
            .values(coins=User.coins + amount)
        )
        if result.rowcount != 1:
            raise NotFoundError("User not found")

        return await self.get_balance_async(user_id)

    async def transfer_in_tx_async(
        self,
        sender_id: uuid.UUID,
        receiver_id: uuid.UUID,
        amount: int,
        text: str | None = None,
    ) -> Messages:
        """Debit + credit + message record; the caller owns the transaction."""
        if sender_id == receiver_id:
            raise BadRequestError("You cannot send coins to yourself")

        receiver_exists = await self.db.scalar(
            select(User.id).where(User.id == receiver_id)
        )
        if not receiver_exists:
            raise NotFoundError("Receiver not found")

        await self.debit_async(sender_id, amount)
        await self.credit_async(receiver_id, amount)

        message = Messages(
            sender_id=sender_id,
            receiver_id=receiver_id,
            text=text,
            coins=amount,
        )
        self.db.add(message)
        await self.db.flush()
        return message

    # ==============================
    # 🔁 PEER TRANSFER
    # ==============================

    async def send_coins_async(
        self, sender_id: uuid.UUID, receiver_id: uuid.UUID, amount: int
    ):
        try:

            async def work():
                message = await self.transfer_in_tx_async(sender_id, receiver_id, amount)
                return message.id, await self.get_balance_async(sender_id)

            message_id, balance = await run_atomic(self.db, work)
            logger.info(f"💸 {sender_id} sent {amount} coins to {receiver_id}")
            return {
                "message": f"{amount} coins sent",
                "amount": amount,
                "coins": balance,
                "message_id": message_id,
            }
        except HTTPException:
            raise
        except Exception as e:
            logger.exception(f"Coin transfer failed: {e}")
            raise InternalError("Could not send coins")

    # ==============================
    # ⭐ PREMIUM
    # ==============================

    async def subscribe_premium_async(self, user_id: uuid.UUID):
        try:
            cost = settings.PREMIUM_COST

            async def work():
                user = await self.db.scalar(
                    select(User)
                    .where(User.id == user_id)
                    .with_for_update()
                    .execution_options(populate_existing=True)
                )
                if not user:
                    raise NotFoundError("User not found")
                if user.is_premium:
                    raise BadRequestError("You already have a premium subscription")

                balance = await self.debit_async(user_id, cost)
                await self.db.execute(
                    update(User).where(User.id == user_id).values(is_premium=True)
                )
                payment = Payments(
                    user_id=user_id,
                    amount=cost,
                    type=PaymentType.PREMIUM_SUBSCRIPTION.value,
                    status=PaymentStatus.COMPLETED.value,
                )
                self.db.add(payment)
                await self.db.flush()
                return balance, payment.id

            balance, payment_id = await run_atomic(self.db, work)
            logger.info(f"⭐ User {user_id} subscribed to premium for {cost} coins")
            return {
                "message": "Premium subscription activated",
                "is_premium": True,
                "coins": balance,
                "payment_id": payment_id,
            }
        except HTTPException:
            raise
        except Exception as e:
            logger.exception(f"Premium subscription failed: {e}")
            raise InternalError("Could not activate premium")

    # ==============================
    # 📜 WALLET VIEW
    # ==============================

    async def get_wallet_async(self, user_id: uuid.UUID):
        user = await self.db.scalar(select(User).where(User.id == user_id))
        if not user:
            raise NotFoundError("User not found")

        payments = (
            await self.db.scalars(
                select(Payments)
                .where(Payments.user_id == user_id)
                .order_by(desc(Payments.created_at))
            )
        ).all()

        return {
            "coins": user.coins,
            "is_premium": user.is_premium,
            "payments": [
                {
                    "id": p.id,
                    "type": p.type,
                    "amount": p.amount,
                    "status": p.status,
                    "course_id": p.course_id,
                    "created_at": p.created_at,
                }
                for p in payments
            ],
        }
