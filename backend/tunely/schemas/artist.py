"""Artist Schemas — registration, subscription update, public profile."""

from uuid import UUID

from pydantic import BaseModel, Field

from tunely.core.artist_handles import build_share_links
from tunely.core.repository_protocols import ArtistLike


class ArtistCreate(BaseModel):
    handle: str = Field(min_length=1, max_length=40)
    display_name: str = Field(min_length=1, max_length=100)


class SubscriptionUpdate(BaseModel):
    subscribed: bool


class ShareLinks(BaseModel):
    request_url: str
    display_url: str


class ArtistResponse(BaseModel):
    id: UUID
    handle: str
    display_name: str
    subscribed: bool
    share_links: ShareLinks

    @classmethod
    def from_model(cls, artist: ArtistLike, base_url: str) -> "ArtistResponse":
        return cls(
            id=artist.id,
            handle=artist.handle,
            display_name=artist.display_name,
            subscribed=artist.subscribed,
            share_links=ShareLinks(**build_share_links(base_url, artist.handle)),
        )


class ArtistSummary(BaseModel):
    """What audience-facing views show about the performer."""
    handle: str
    display_name: str
