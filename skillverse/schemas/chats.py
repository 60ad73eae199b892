"""Chat schemas"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from skillverse.schemas.users import UserBrief


class StartChatRequest(BaseModel):
    user_id: int


class SendMessageRequest(BaseModel):
    content: str = Field(..., min_length=1, max_length=5000)


class ChatMessage(BaseModel):
    id: int
    chat_id: int
    sender_id: int
    sender: Optional[UserBrief] = None
    content: str
    read: bool
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class ChatResponse(BaseModel):
    id: int
    participant_ids: List[int]
    participants: List[UserBrief]
    last_message: Optional[ChatMessage] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class MarkReadResponse(BaseModel):
    message: str
    updated: int
