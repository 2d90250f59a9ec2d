"""FastAPI HTTP layer package.

Public re-export so callers can write::

    from chviewer.api import app

    uvicorn chviewer.api:app --reload
"""

from chviewer.api.app import app

__all__ = ["app"]
