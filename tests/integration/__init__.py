"""Integration tests for components working together as a system.

Coverage:
    - POST /api/chat through the real FastAPI app
    - Full stack with the OpenAI provider against a mocked OpenAI API
    - Client disconnect releasing the upstream stream
    - The chat page's HTTP client against the app

No API key or network access required.
"""
