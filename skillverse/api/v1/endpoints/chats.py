"""
Chat endpoints
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from skillverse.core.database import get_db
from skillverse.core.security import get_current_user
from skillverse.models import User
from skillverse.schemas.chats import (
    ChatMessage,
    ChatResponse,
    MarkReadResponse,
    SendMessageRequest,
    StartChatRequest,
)
from skillverse.schemas.users import PublicUser
from skillverse.services.chats import ChatService

router = APIRouter()


@router.get("/users", response_model=List[PublicUser])
async def search_users(
    q: Optional[str] = Query(None, description="Name, skill or achievement"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Find teammates to chat with"""
    return ChatService.search_users(db, current_user, q)


@router.get("/", response_model=List[ChatResponse])
async def get_user_chats(
    db: Session = Depends(get_db), current_user: User = Depends(get_current_user)
):
    return ChatService.get_user_chats(db, current_user)


@router.post("/", response_model=ChatResponse)
async def get_or_start_chat(
    data: StartChatRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Open the chat with another user, creating it on first contact"""
    return ChatService.get_or_start_chat(db, current_user, data.user_id)


@router.get("/{chat_id}/messages", response_model=List[ChatMessage])
async def get_chat_messages(
    chat_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return ChatService.get_chat_messages(db, current_user, chat_id)


@router.post(
    "/{chat_id}/messages", response_model=ChatMessage, status_code=status.HTTP_201_CREATED
)
async def send_message(
    chat_id: int,
    data: SendMessageRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return ChatService.send_message(db, current_user, chat_id, data.content)


@router.post("/{chat_id}/read", response_model=MarkReadResponse)
async def mark_messages_read(
    chat_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    updated = ChatService.mark_read(db, current_user, chat_id)
    return {"message": "Messages marked as read", "updated": updated}
