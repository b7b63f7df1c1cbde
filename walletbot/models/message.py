from pydantic import BaseModel, Field
from typing import List, Dict, Any, Optional

class InteractiveButtonReply(BaseModel):
    id: str
    title: str

class InteractiveListReply(BaseModel):
    id: str
    title: str
    description: Optional[str] = None

class Interactive(BaseModel):
    type: str  # "button_reply" or "list_reply"
    button_reply: Optional[InteractiveButtonReply] = None
    list_reply: Optional[InteractiveListReply] = None

    @property
    def reply_id(self) -> Optional[str]:
        """Id of the chosen button or list row."""
        if self.type == "button_reply" and self.button_reply:
            return self.button_reply.id
        if self.type == "list_reply" and self.list_reply:
            return self.list_reply.id
        return None

class Message(BaseModel):
    from_: str = Field(alias="from")      # "from" is a keyword
    id: str
    timestamp: str
    type: str
    text: Optional[Dict[str, Any]] = None
    interactive: Optional[Interactive] = None

    @property
    def content(self) -> Optional[str]:
        """
        What the user said: the text body or the id of the chosen
        button/list row. None for unsupported message types.
        """
        if self.type == "text" and self.text:
            return self.text.get("body", "")
        if self.type == "interactive" and self.interactive:
            return self.interactive.reply_id
        return None

class Status(BaseModel):
    id: str
    status: str
    timestamp: str
    recipient_id: Optional[str] = None

class Value(BaseModel):
    messages: List[Message] = Field(default_factory=list)
    statuses: List[Status] = Field(default_factory=list)

class Change(BaseModel):
    value: Value

class WhatsAppEntry(BaseModel):
    changes: List[Change]

class WebhookPayload(BaseModel):
    entry: List[WhatsAppEntry] = Field(default_factory=list)
