"""Trakt API response models."""

from datetime import datetime

from pydantic import BaseModel, Field


class TraktIds(BaseModel):
    """External identifiers of a Trakt movie or show."""

    trakt: int | None = None
    slug: str | None = None
    imdb: str | None = None
    tmdb: int | None = None
    tvdb: int | None = None


class TraktMedia(BaseModel):
    """A movie or show as returned by Trakt."""

    title: str
    year: int | None = None
    ids: TraktIds = Field(default_factory=TraktIds)


class WatchlistItem(BaseModel):
    """An entry of the user's Trakt watch-list."""

    rank: int | None = None
    listed_at: datetime | None = None
    type: str = "movie"
    movie: TraktMedia | None = None
    show: TraktMedia | None = None

    @property
    def media(self) -> TraktMedia | None:
        """The movie or show this entry refers to."""
        return self.movie or self.show


class SearchHit(BaseModel):
    """A Trakt search result."""

    type: str
    score: float = 0.0
    movie: TraktMedia | None = None
    show: TraktMedia | None = None

    @property
    def media(self) -> TraktMedia | None:
        """The movie or show this hit refers to."""
        return self.movie or self.show
