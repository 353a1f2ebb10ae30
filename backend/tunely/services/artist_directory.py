"""Artist Directory — performer profiles, public handle lookup, billing flag.

Invariants:
    - One profile per identity-provider id; handles unique case-insensitively
    - Unknown handles raise ResourceNotFoundError (never an empty profile)
    - `subscribed` is the only field that changes after registration
"""

import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from tunely.core.artist_handles import normalize_handle
from tunely.core.domain_types import ArtistId
from tunely.core.errors import (
    ConflictError, ErrorContext, InvalidInputError, ResourceNotFoundError,
)
from tunely.core.repository_protocols import ArtistLike, ArtistRepository
from tunely.infrastructure.repositories import SqlArtistRepository

logger = logging.getLogger(__name__)


class ArtistDirectory:
    def __init__(self, db: AsyncSession):
        self.db = db
        self.artists: ArtistRepository = SqlArtistRepository(db)

    async def register(
        self, artist_id: ArtistId, handle: str, display_name: str,
    ) -> ArtistLike:
        """Create the profile for a freshly signed-up artist."""
        normalized = normalize_handle(handle)
        name = (display_name or "").strip()
        if not name:
            raise InvalidInputError("Display name is required", "display_name")

        context = ErrorContext(artist_id=str(artist_id))
        if await self.artists.get(artist_id) is not None:
            raise ConflictError("Artist profile already exists", context)
        if await self.artists.get_by_handle(normalized) is not None:
            raise ConflictError(f"Handle '{normalized}' is already taken", context)

        try:
            artist = await self.artists.create(artist_id, normalized, name)
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise ConflictError(f"Handle '{normalized}' is already taken", context)

        logger.info(f"Artist registered as '{normalized}'", extra={"artist_id": artist_id})
        return artist

    async def get(self, artist_id: ArtistId) -> ArtistLike:
        artist = await self.artists.get(artist_id)
        if artist is None:
            raise ResourceNotFoundError("Artist", str(artist_id))
        return artist

    async def get_by_handle(self, handle: str) -> ArtistLike:
        artist = await self.artists.get_by_handle((handle or "").strip().lower())
        if artist is None:
            raise ResourceNotFoundError("Artist", handle)
        return artist

    async def set_subscription(
        self, artist_id: ArtistId, subscribed: bool,
    ) -> ArtistLike:
        """Billing status change reported by the payment provider."""
        artist = await self.artists.set_subscribed(artist_id, subscribed)
        if artist is None:
            raise ResourceNotFoundError("Artist", str(artist_id))
        await self.db.commit()
        logger.info(
            f"Subscription set to {subscribed}", extra={"artist_id": artist_id},
        )
        return artist
