"""Message repository - Database operations for the SMS log"""

from sqlalchemy.orm import Session, joinedload

from ...models import Message


class MessageRepository:
    """Append-only: messages are created and read, never updated or deleted"""

    @staticmethod
    def get_workspace_messages(db: Session, workspace_id: int) -> list[Message]:
        """All workspace messages with their customer, newest first"""
        return (
            db.query(Message)
            .options(joinedload(Message.customer))
            .filter(Message.workspace_id == workspace_id)
            .order_by(Message.created_at.desc(), Message.id.desc())
            .all()
        )

    @staticmethod
    def create_message(db: Session, workspace_id: int, **message_data) -> Message:
        message = Message(workspace_id=workspace_id, **message_data)
        db.add(message)
        db.commit()
        db.refresh(message)
        return message
