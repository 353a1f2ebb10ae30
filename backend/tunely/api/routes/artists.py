"""Artist Routes — profile registration, handle lookup, live-session lookup."""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from tunely.api.dependencies import get_artist_id, get_public_base_url
from tunely.core.domain_types import ArtistId
from tunely.infrastructure.database import get_db
from tunely.schemas.artist import ArtistCreate, ArtistResponse, SubscriptionUpdate
from tunely.schemas.session import ActiveSessionResponse, SessionResponse
from tunely.services.artist_directory import ArtistDirectory
from tunely.services.session_manager import SessionManager

router = APIRouter(prefix="/api/v1/artists", tags=["artists"])


@router.post(
    "", response_model=ArtistResponse, status_code=status.HTTP_201_CREATED,
)
async def register_artist(
    body: ArtistCreate,
    artist_id: ArtistId = Depends(get_artist_id),
    base_url: str = Depends(get_public_base_url),
    db: AsyncSession = Depends(get_db),
):
    """Create the signed-in artist's profile."""
    artist = await ArtistDirectory(db).register(
        artist_id, body.handle, body.display_name,
    )
    return ArtistResponse.from_model(artist, base_url)


@router.put("/me/subscription", response_model=ArtistResponse)
async def update_subscription(
    body: SubscriptionUpdate,
    artist_id: ArtistId = Depends(get_artist_id),
    base_url: str = Depends(get_public_base_url),
    db: AsyncSession = Depends(get_db),
):
    artist = await ArtistDirectory(db).set_subscription(artist_id, body.subscribed)
    return ArtistResponse.from_model(artist, base_url)


@router.get("/{handle}", response_model=ArtistResponse)
async def get_artist_by_handle(
    handle: str,
    base_url: str = Depends(get_public_base_url),
    db: AsyncSession = Depends(get_db),
):
    artist = await ArtistDirectory(db).get_by_handle(handle)
    return ArtistResponse.from_model(artist, base_url)


@router.get("/{handle}/session", response_model=ActiveSessionResponse)
async def get_active_session(handle: str, db: AsyncSession = Depends(get_db)):
    """The artist's live session, or null when they are not performing."""
    artist = await ArtistDirectory(db).get_by_handle(handle)
    session = await SessionManager(db).get_active_session(artist.id)
    return ActiveSessionResponse(
        session=SessionResponse.from_model(session) if session else None,
    )
