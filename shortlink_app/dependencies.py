"""
FastAPI dependencies.

Nothing here constructs long-lived objects: ``main.create_app`` builds the
engine, cache, code generator and link cache once in its lifespan and keeps
them on ``app.state``. These functions only hand them to route handlers.
"""

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from shortlink_app.database.connection import get_db
from shortlink_app.services.link_service import LinkService


def get_link_service(
    request: Request,
    db: AsyncSession = Depends(get_db),
) -> LinkService:
    """
    Get LinkService with the request's session and the app's collaborators.
    """
    state = request.app.state
    return LinkService(
        db=db,
        code_generator=state.code_generator,
        link_cache=state.link_cache,
        base_url=state.settings.base_url,
        max_insert_retries=state.settings.max_insert_retries,
    )
