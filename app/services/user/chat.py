import uuid

from fastapi import Depends, HTTPException
from loguru import logger
from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from app.core.exceptions import BadRequestError, InternalError, NotFoundError
from app.db.models.database import Messages, User
from app.db.session import get_session
from app.db.transaction import run_atomic
from app.libs.formats.users import user_brief
from app.schemas.user.social import MessageSend
from app.services.shares.wallets import WalletsService


def message_view(message: Messages, sender: User, receiver: User) -> dict:
    return {
        "id": message.id,
        "sender": user_brief(sender),
        "receiver": user_brief(receiver),
        "text": message.text,
        "coins": message.coins,
        "created_at": message.created_at,
    }


class ChatService:
    def __init__(
        self,
        db: AsyncSession = Depends(get_session),
        wallets: WalletsService = Depends(WalletsService),
    ):
        self.db = db
        self.wallets = wallets

    async def get_messages_async(self, user_id: uuid.UUID, other_id: uuid.UUID):
        sender = aliased(User)
        receiver = aliased(User)
        rows = (
            await self.db.execute(
                select(Messages, sender, receiver)
                .join(sender, sender.id == Messages.sender_id)
                .join(receiver, receiver.id == Messages.receiver_id)
                .where(
                    or_(
                        (Messages.sender_id == user_id) & (Messages.receiver_id == other_id),
                        (Messages.sender_id == other_id) & (Messages.receiver_id == user_id),
                    )
                )
                .order_by(Messages.created_at)
            )
        ).all()
        return [message_view(m, s, r) for m, s, r in rows]

    async def send_message_async(
        self, sender_id: uuid.UUID, receiver_id: uuid.UUID, schema: MessageSend
    ):
        try:
            if sender_id == receiver_id:
                raise BadRequestError("You cannot message yourself")

            text = (schema.text or "").strip() or None
            if text is None and schema.coins <= 0:
                raise BadRequestError("Message text or coins are required")

            receiver = await self.db.scalar(select(User).where(User.id == receiver_id))
            if not receiver:
                raise NotFoundError("Receiver not found")

            async def work():
                if schema.coins > 0:
                    # debit, credit and the message land together
                    message = await self.wallets.transfer_in_tx_async(
                        sender_id, receiver_id, schema.coins, text
                    )
                else:
                    message = Messages(sender_id=sender_id, receiver_id=receiver_id, text=text, coins=0)
                    self.db.add(message)
                    await self.db.flush()
                return message.id

            message_id = await run_atomic(self.db, work)
            if schema.coins > 0:
                logger.info(f"💬 {sender_id} sent {schema.coins} coins to {receiver_id} with a message")

            message = await self.db.scalar(select(Messages).where(Messages.id == message_id))
            users = {
                u.id: u
                for u in (
                    await self.db.scalars(
                        select(User)
                        .where(User.id.in_([sender_id, receiver_id]))
                        .execution_options(populate_existing=True)
                    )
                ).all()
            }
            return {
                "message": "Message sent",
                "data": message_view(message, users[sender_id], users[receiver_id]),
                "coins": users[sender_id].coins,
            }
        except HTTPException:
            raise
        except Exception as e:
            logger.exception(f"Sending message failed: {e}")
            raise InternalError("Could not send message")
