"""
Shared data models for the API and the chat backend.
"""

from typing import List, Literal, Optional
from pydantic import BaseModel

Role = Literal["user", "assistant", "system"]
Action = Literal["next", "variant"]

class Message(BaseModel):
    role: Role
    content: str

class ChatRequest(BaseModel):
    model: str
    action: Action = "next"
    messages: List[Message]

class Choice(BaseModel):
    delta: Optional[Message] = None
    message: Message

class ChatResponse(BaseModel):
    whisper: Optional[str] = None
    choices: List[Choice]
