"""FastAPI host for the chat widget.

Serves the NiceGUI page and operational endpoints.

Endpoints:
    - GET /health: Service health status
"""

from src.api.app import app, create_app

__all__ = ["app", "create_app"]
