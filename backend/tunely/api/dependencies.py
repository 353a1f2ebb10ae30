"""Request Dependencies — artist identity and viewer policies.

Invariants:
    - The identity provider's artist id arrives in X-Artist-Id and is trusted as-is
    - Performer routes without an identity raise UnauthenticatedError (401)
"""

from uuid import UUID

from fastapi import Header

from tunely.config import get_settings
from tunely.core.domain_types import ArtistId, ViewerRole
from tunely.core.errors import UnauthenticatedError
from tunely.core.view_sync import ViewPolicy, build_view_policies


async def get_optional_artist_id(
    x_artist_id: UUID | None = Header(None, alias="X-Artist-Id"),
) -> ArtistId | None:
    return ArtistId(x_artist_id) if x_artist_id else None


async def get_artist_id(
    x_artist_id: UUID | None = Header(None, alias="X-Artist-Id"),
) -> ArtistId:
    if x_artist_id is None:
        raise UnauthenticatedError()
    return ArtistId(x_artist_id)


def get_view_policies() -> dict[ViewerRole, ViewPolicy]:
    settings = get_settings()
    return build_view_policies(
        dashboard_poll_seconds=settings.dashboard_poll_seconds,
        requester_poll_seconds=settings.requester_poll_seconds,
        display_poll_seconds=settings.display_poll_seconds,
        requester_queue_limit=settings.requester_queue_limit,
        display_queue_limit=settings.display_queue_limit,
    )


def get_public_base_url() -> str:
    return get_settings().public_base_url
