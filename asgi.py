"""
asgi.py -- Application assembly for adboard.

uvicorn and other ASGI servers load the app from here, so the server entry
point stays stable even if api/main.py grows or is split.

Run with:  uvicorn asgi:app --reload
           python main.py serve
"""

from api.main import app

__all__ = ["app"]
