"""Schemas for community song uploads."""

from typing import List, Optional
from pydantic import BaseModel, Field


class SongForm(BaseModel):
    """Metadata the contributor fills in next to the file."""
    title: str = ""
    artist: str = ""
    genre: str = "Pop"
    difficulty: str = "Medium"
    language: str = "Indonesia"


class SongRecord(BaseModel):
    """Row written once to the songs table."""
    title: str
    artist: str
    genre: str
    difficulty: str
    language: str
    file_url: str
    file_name: str
    file_type: str
    file_size: int
    uploaded_by: str
    uploaded_at: str  # ISO format
    duration: Optional[float] = None  # Filled in later by media processing
    status: str  # "approved" or "pending"


class UploadResult(BaseModel):
    song: dict
    message: str


class SongOptionsResponse(BaseModel):
    genres: List[str]
    difficulties: List[str]
    languages: List[str]
    allowed_extensions: dict
    max_upload_mb: int


class SongListResponse(BaseModel):
    songs: List[dict] = Field(default_factory=list)
    total: int = 0


GENRES = [
    "Pop", "Rock", "Dangdut", "Jazz", "Electronic",
    "Hip Hop", "R&B", "Country", "Folk", "Classical",
]

DIFFICULTIES = ["Easy", "Medium", "Hard"]

LANGUAGES = ["Indonesia", "English", "Korean", "Japanese", "Mandarin", "Other"]

ALLOWED_EXTENSIONS = {
    "audio": [".mp3", ".wav", ".m4a", ".aac", ".ogg", ".flac"],
    "video": [".mp4", ".mov", ".avi", ".mkv", ".webm"],
    "lyrics": [".lrc", ".txt"],
}
