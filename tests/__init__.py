"""Test package for the chat client.

Structure:
    - unit/: Individual modules in isolation
    - integration/: Shell, session and dispatcher together; the HTTP host
    - fakes.py: In-memory Transport Channel and Navigator

No network access is needed; the Socket.IO endpoint is replaced by an
in-memory channel. Leverages pytest with pytest-check for soft assertions.
"""
