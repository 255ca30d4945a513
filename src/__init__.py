"""Lotte Finance chat client - real-time conversation with a remote assistant.

Combines python-socketio for the assistant channel, Pydantic for the data
model, NiceGUI for the chat widget and FastAPI for hosting.

Components:
    - chat: Session state machine, transcript, dispatch and shell state
    - models: Message and wire payload schemas
    - ui: Web chat widget
    - api: HTTP host and health endpoint
"""

__version__ = "0.1.0"
