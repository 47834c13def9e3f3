from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

Role = Literal["system", "user", "assistant", "tool", "function", "data"]


class Message(BaseModel):
    """A single role-tagged message in the conversation.

    Attributes:
        role: Who produced the message.
        content: The message text.
        id: Opaque identifier assigned by the client, never forwarded upstream.
    """

    model_config = ConfigDict(frozen=True)

    role: Role
    content: str
    id: str | None = None


class ChatRequest(BaseModel):
    """Request payload for the chat relay endpoint.

    Attributes:
        messages: The full conversation so far, oldest first.
    """

    messages: list[Message] = Field(..., description="Conversation messages, oldest first")


class ErrorResponse(BaseModel):
    """Body returned for every relay failure."""

    error: str
