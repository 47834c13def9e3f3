"""Pydantic models for API requests and responses.

Provides type safety, validation, and automatic OpenAPI documentation.

Models:
    - Message: Individual role-tagged message in a conversation
    - ChatRequest: Incoming chat request payload
    - ErrorResponse: Structured error body for failed requests
"""

from chat_relay.models.schemas import ChatRequest, ErrorResponse, Message, Role

__all__ = ["ChatRequest", "ErrorResponse", "Message", "Role"]
