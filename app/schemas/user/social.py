import uuid
from typing import Optional

from pydantic import BaseModel, Field


class FriendAdd(BaseModel):
    friend_id: uuid.UUID


class MessageSend(BaseModel):
    text: Optional[str] = Field(None, max_length=5000)
    coins: int = Field(0, ge=0)


class CoinTransfer(BaseModel):
    amount: int = Field(..., gt=0)
