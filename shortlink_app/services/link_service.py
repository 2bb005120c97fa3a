import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from shortlink_app.exceptions import CodeGenerationError
from shortlink_app.models.link import ShortLink
from shortlink_app.schemas.link import validate_target_url
from shortlink_app.services.code_generator import CodeGenerator
from shortlink_app.services.link_cache import LinkCache

logger = logging.getLogger(__name__)


class LinkService:
    """
    Creates and resolves short links for one request.

    Collaborators are passed in explicitly; the long-lived ones (generator,
    link cache) are built once in the application lifespan, the session is
    per request.
    """

    def __init__(
        self,
        db: AsyncSession,
        code_generator: CodeGenerator,
        link_cache: LinkCache,
        base_url: Optional[str] = None,
        max_insert_retries: int = 5,
    ):
        self.db = db
        self.code_generator = code_generator
        self.link_cache = link_cache
        self.base_url = base_url.rstrip("/") if base_url else None
        self.max_insert_retries = max_insert_retries

    def compose_short_url(self, code: str) -> str:
        if self.base_url:
            return f"{self.base_url}/{code}"
        return code

    async def create_short_link(self, url: str) -> ShortLink:
        """Create a new short link for ``url``.

        Always creates a new record, even if the URL was shortened before.

        Process:
        1. Validate the URL (InvalidURLError, nothing persisted)
        2. Generate a code that is free at the time of the check
        3. Insert and commit; a unique-index violation means another request
           claimed the same code in the meantime, so roll back and go to 2
        4. Cache the mapping (best effort)
        """
        target_url = validate_target_url(url)

        for attempt in range(1, self.max_insert_retries + 1):
            code = await self.code_generator.generate(self.db)
            link = ShortLink(
                code=code,
                target_url=target_url,
                short_url=self.compose_short_url(code),
            )
            self.db.add(link)
            try:
                await self.db.commit()
            except IntegrityError:
                await self.db.rollback()
                logger.warning(
                    "Code %s was claimed concurrently (attempt %d/%d), regenerating",
                    code, attempt, self.max_insert_retries,
                )
                continue

            await self.link_cache.store(link.code, link.target_url)
            return link

        raise CodeGenerationError(
            f"Could not persist a unique code after {self.max_insert_retries} attempts"
        )

    async def get_link(self, code: str) -> Optional[ShortLink]:
        """Get the stored record for ``code`` (durable store only)."""
        result = await self.db.execute(select(ShortLink).where(ShortLink.code == code))
        return result.scalar_one_or_none()

    async def resolve(self, code: str) -> Optional[str]:
        """Target URL for ``code``, cache first; None if there is no such code."""
        return await self.link_cache.resolve(self.db, code)
