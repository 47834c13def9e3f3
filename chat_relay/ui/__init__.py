"""NiceGUI interface - thin presentation layer for the chat relay.

Responsibilities:
    - Transcript display with streaming updates
    - Markdown rendering of assistant replies
    - Surfacing relay errors to the user

Contains no relay logic. Talks to the API over HTTP only.
"""
