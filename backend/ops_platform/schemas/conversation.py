from pydantic import BaseModel, ConfigDict
from typing import Optional
from datetime import datetime

from ops_platform.models.conversation import MessageChannel, MessageDirection


class MessageResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    conversation_id: int
    direction: MessageDirection
    channel: MessageChannel
    subject: Optional[str] = None
    body: str
    is_automated: bool = False
    external_id: Optional[str] = None
    created_at: datetime
