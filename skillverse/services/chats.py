"""
Chat service for SkillVerse
Two-party conversations with store and forward messages
"""

import logging
from typing import List, Optional

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from skillverse.core.exceptions import AuthorizationException, NotFoundException, ValidationException
from skillverse.models import Chat, Message, User
from skillverse.models.base import utcnow
from skillverse.services.users import UserService

logger = logging.getLogger(__name__)


class ChatService:
    @staticmethod
    def search_users(db: Session, user: User, q: Optional[str] = None) -> List[User]:
        """Teammate search over everyone except the caller"""
        return UserService.search(db, q, exclude_id=user.id)

    @staticmethod
    def find_chat(db: Session, user_a_id: int, user_b_id: int) -> Optional[Chat]:
        low, high = Chat.normalize_pair(user_a_id, user_b_id)
        return (
            db.query(Chat)
            .filter(Chat.user_low_id == low, Chat.user_high_id == high)
            .first()
        )

    @staticmethod
    def get_or_start_chat(db: Session, user: User, other_user_id: int) -> Chat:
        """
        Return the chat between the caller and another user, creating it once

        Raises:
            ValidationException: If the caller targets themselves
            NotFoundException: If the other user does not exist
        """
        if other_user_id == user.id:
            raise ValidationException("You cannot start a chat with yourself")
        UserService.get_user_or_404(db, other_user_id)

        chat = ChatService.find_chat(db, user.id, other_user_id)
        if chat is not None:
            return chat

        low, high = Chat.normalize_pair(user.id, other_user_id)
        chat = Chat(user_low_id=low, user_high_id=high)
        db.add(chat)
        try:
            db.commit()
        except IntegrityError:
            # The other participant opened the same chat first
            db.rollback()
            return ChatService.find_chat(db, user.id, other_user_id)

        db.refresh(chat)
        logger.info(f"Chat {chat.id} started between users {low} and {high}")
        return chat

    @staticmethod
    def get_chat_for_participant(db: Session, user: User, chat_id: int) -> Chat:
        chat = db.get(Chat, chat_id)
        if chat is None:
            raise NotFoundException("Chat")
        if not chat.has_participant(user.id):
            raise AuthorizationException("You are not a participant in this chat")
        return chat

    @staticmethod
    def send_message(db: Session, sender: User, chat_id: int, content: str) -> Message:
        chat = ChatService.get_chat_for_participant(db, sender, chat_id)
        if not content or not content.strip():
            raise ValidationException("Message content cannot be empty")

        message = Message(chat_id=chat.id, sender_id=sender.id, content=content.strip())
        db.add(message)
        db.flush()

        chat.last_message = message
        chat.updated_at = utcnow()
        db.commit()
        db.refresh(message)
        return message

    @staticmethod
    def mark_read(db: Session, user: User, chat_id: int) -> int:
        """Mark messages from the other participant as read; returns how many changed"""
        chat = ChatService.get_chat_for_participant(db, user, chat_id)
        updated = (
            db.query(Message)
            .filter(
                Message.chat_id == chat.id,
                Message.sender_id != user.id,
                Message.read.is_(False),
            )
            .update({Message.read: True}, synchronize_session=False)
        )
        db.commit()
        return updated

    @staticmethod
    def get_user_chats(db: Session, user: User) -> List[Chat]:
        """Chats of the caller, most recently active first"""
        return (
            db.query(Chat)
            .filter(or_(Chat.user_low_id == user.id, Chat.user_high_id == user.id))
            .order_by(Chat.updated_at.desc(), Chat.id.desc())
            .all()
        )

    @staticmethod
    def get_chat_messages(db: Session, user: User, chat_id: int) -> List[Message]:
        chat = ChatService.get_chat_for_participant(db, user, chat_id)
        return list(chat.messages)
