import uuid

from fastapi import APIRouter, Body, Depends, status

from app.core.deps import AuthorizationService
from app.schemas.user.social import MessageSend
from app.services.user.chat import ChatService

router = APIRouter(prefix="/chat", tags=["Chat"])


@router.get("/{user_id}/messages")
async def get_messages(
    user_id: uuid.UUID,
    authorization: AuthorizationService = Depends(AuthorizationService),
    chat_service: ChatService = Depends(ChatService),
):
    user = await authorization.get_current_user()
    return await chat_service.get_messages_async(user.id, user_id)


@router.post("/{user_id}/send", status_code=status.HTTP_201_CREATED)
async def send_message(
    user_id: uuid.UUID,
    schema: MessageSend = Body(...),
    authorization: AuthorizationService = Depends(AuthorizationService),
    chat_service: ChatService = Depends(ChatService),
):
    user = await authorization.get_current_user()
    return await chat_service.send_message_async(user.id, user_id, schema)
