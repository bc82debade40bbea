"""FastAPI HTTP layer package.

Public re-export so callers can write::

    from edfinder.api import app

    uvicorn edfinder.api:app --reload
"""

from edfinder.api.app import app, create_app

__all__ = ["app", "create_app"]
