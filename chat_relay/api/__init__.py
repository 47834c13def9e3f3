"""FastAPI endpoints for the chat relay.

HTTP and streaming routes with async request handling.

Endpoints:
    - GET /health: Service health status
    - POST /api/chat: Relay a conversation and stream the completion back
"""

from chat_relay.api.app import app, create_app

__all__ = ["app", "create_app"]
