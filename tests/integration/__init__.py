"""Integration tests for components working together.

Coverage:
    - Full conversation through ChatShell, ChatSession and Dispatcher
    - FastAPI host endpoints via httpx ASGITransport
"""
