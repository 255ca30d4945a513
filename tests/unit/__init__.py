"""Unit tests for individual components in isolation.

Coverage:
    - models/: Message and wire payload validation
    - chat/: Transcript, actions, session, dispatch, shell, transport, config
    - ui/: Formatting helpers

Uses the in-memory channel or a stubbed socketio client for I/O.
"""
