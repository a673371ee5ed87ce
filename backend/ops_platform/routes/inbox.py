from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session
from pydantic import BaseModel
from typing import List, Optional
from ops_platform.database import get_db
from ops_platform.dependencies import get_workspace_member
from ops_platform.models.conversation import MessageChannel
from ops_platform.models.user import WorkspaceUser
from ops_platform.schemas.conversation import MessageResponse
from ops_platform.services import inbox_service

router = APIRouter()


class ReplyRequest(BaseModel):
    channel: MessageChannel
    body: str
    subject: Optional[str] = None


@router.get("/{workspace_id}/conversations")
def get_conversations(workspace_id: int, member: WorkspaceUser = Depends(get_workspace_member), db: Session = Depends(get_db)):
    """Conversations by latest activity, each flagged with has_unread"""
    return inbox_service.list_conversations(db, workspace_id)


@router.get("/{workspace_id}/conversations/{conversation_id}")
def get_conversation(
    workspace_id: int,
    conversation_id: int,
    member: WorkspaceUser = Depends(get_workspace_member),
    db: Session = Depends(get_db)
):
    return inbox_service.get_conversation(db, workspace_id, conversation_id)


@router.patch("/{workspace_id}/conversations/{conversation_id}/read", status_code=status.HTTP_204_NO_CONTENT)
def mark_read(
    workspace_id: int,
    conversation_id: int,
    member: WorkspaceUser = Depends(get_workspace_member),
    db: Session = Depends(get_db)
):
    inbox_service.mark_conversation_read(db, workspace_id, conversation_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{workspace_id}/conversations/{conversation_id}/messages", response_model=List[MessageResponse])
def get_messages(
    workspace_id: int,
    conversation_id: int,
    member: WorkspaceUser = Depends(get_workspace_member),
    db: Session = Depends(get_db)
):
    return inbox_service.get_messages(db, workspace_id, conversation_id)


@router.post(
    "/{workspace_id}/conversations/{conversation_id}/reply",
    response_model=MessageResponse,
    status_code=status.HTTP_201_CREATED,
)
def reply(
    workspace_id: int,
    conversation_id: int,
    data: ReplyRequest,
    member: WorkspaceUser = Depends(get_workspace_member),
    db: Session = Depends(get_db)
):
    """Send a manual reply; automated messages to the contact pause for 24h"""
    return inbox_service.send_reply(
        db, workspace_id, conversation_id, data.channel, data.body, subject=data.subject
    )
