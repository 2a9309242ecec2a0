"""Real-Debrid API response models."""

from datetime import datetime

from pydantic import BaseModel, Field

from debridarr.models.common import TorrentStatus


class User(BaseModel):
    """The authenticated Real-Debrid user."""

    id: int
    username: str
    email: str | None = None
    points: int = 0
    type: str = "free"
    expiration: datetime | None = None


class Torrent(BaseModel):
    """A torrent in the user's Real-Debrid list."""

    id: str
    filename: str
    hash: str = ""
    bytes: int = 0
    status: TorrentStatus = TorrentStatus.UNKNOWN
    progress: float = 0
    added: datetime | None = None
    links: list[str] = Field(default_factory=list)


class TorrentFile(BaseModel):
    """A file inside a torrent."""

    id: int
    path: str = ""
    bytes: int = 0
    selected: int = 0


class TorrentInfo(Torrent):
    """Detailed torrent information including its files."""

    files: list[TorrentFile] = Field(default_factory=list)


class AddMagnetResponse(BaseModel):
    """Response to adding a magnet link."""

    id: str
    uri: str = ""


class Download(BaseModel):
    """An unrestricted download link."""

    id: str
    filename: str
    filesize: int = 0
    link: str = ""
    download: str = ""
    generated: datetime | None = None
