"""Chat Relay - streaming chat front end for a hosted completion API.

Combines FastAPI for HTTP streaming, httpx for the provider connection,
NiceGUI for the chat page, and Pydantic for data validation.

Components:
    - api: HTTP endpoints and streaming responses
    - relay: Provider forwarding, error classification and stream passthrough
    - ui: Web interface for chat interactions
    - models: Request/response schemas
"""

__version__ = "0.1.0"
