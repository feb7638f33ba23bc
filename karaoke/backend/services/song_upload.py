"""Community song upload: validate the file, push it to storage, record its metadata."""

from __future__ import annotations

import mimetypes
import re
import time
from datetime import datetime, timezone
from typing import Callable, Optional

from loguru import logger

from karaoke.backend import config
from karaoke.backend.schemas.auth import AuthUser
from karaoke.backend.schemas.songs import ALLOWED_EXTENSIONS, SongForm, SongRecord, UploadResult
from karaoke.backend.services.database import SongService
from karaoke.backend.services.supabase_client import SupabaseClient

PercentCallback = Callable[[float], None]

_UNSAFE_CHARS = re.compile(r"[^a-zA-Z0-9.]")
_LAST_EXTENSION = re.compile(r"\.[^/.]+$")


class UploadValidationError(ValueError):
    """The file or form cannot be uploaded as submitted."""


def get_file_type(filename: str) -> str:
    """Classify by the text from the last dot on: audio, video, lyrics or unknown."""
    name = filename.lower()
    dot = name.rfind(".")
    ext = name[dot:] if dot >= 0 else ""
    for file_type, extensions in ALLOWED_EXTENSIONS.items():
        if ext in extensions:
            return file_type
    return "unknown"


def validate_file(filename: str, size: int, max_mb: Optional[int] = None) -> str:
    max_mb = config.MAX_UPLOAD_MB if max_mb is None else max_mb
    file_type = get_file_type(filename)
    if file_type == "unknown":
        raise UploadValidationError(
            "Format file tidak didukung. Gunakan MP3, MP4, atau file yang didukung."
        )
    if size > max_mb * 1024 * 1024:
        raise UploadValidationError(f"File terlalu besar. Maksimal {max_mb}MB.")
    return file_type


def default_title(filename: str) -> str:
    return _LAST_EXTENSION.sub("", filename)


def storage_name(filename: str, timestamp_ms: Optional[int] = None) -> str:
    if timestamp_ms is None:
        timestamp_ms = int(time.time() * 1000)
    return f"{timestamp_ms}_{_UNSAFE_CHARS.sub('_', filename)}"


def resolve_form(form: SongForm, filename: str) -> SongForm:
    """Fill a blank title from the file name and reject a submission that still lacks one."""
    title = form.title.strip() or default_title(filename).strip()
    if not filename or not title:
        raise UploadValidationError("Mohon pilih file dan isi informasi lagu!")
    return form.model_copy(update={"title": title})


def build_song_record(
    form: SongForm,
    file_url: str,
    file_name: str,
    file_type: str,
    file_size: int,
    user: AuthUser,
    is_admin: bool,
) -> SongRecord:
    return SongRecord(
        title=form.title,
        artist=form.artist.strip() or "Unknown Artist",
        genre=form.genre,
        difficulty=form.difficulty,
        language=form.language,
        file_url=file_url,
        file_name=file_name,
        file_type=file_type,
        file_size=file_size,
        uploaded_by=user.id,
        uploaded_at=datetime.now(timezone.utc).isoformat(),
        duration=None,
        status="approved" if is_admin else "pending",
    )


def success_message(title: str, is_admin: bool) -> str:
    if is_admin:
        return f'✅ Lagu "{title}" berhasil diupload dan langsung tersedia di galeri publik!'
    return (
        f'✅ Lagu "{title}" berhasil diupload!\n\n'
        "🎵 Terima kasih atas kontribusi Anda untuk galeri musik komunitas!\n\n"
        "Lagu akan direview admin dan segera tersedia untuk semua pengguna."
    )


def upload_song(
    client: SupabaseClient,
    form: SongForm,
    filename: str,
    data: bytes,
    user: AuthUser,
    is_admin: bool,
    progress: Optional[PercentCallback] = None,
    bucket: str = config.SONGS_BUCKET,
) -> UploadResult:
    """Upload one file and insert its song record.

    ``progress`` receives the transferred percentage (0-100) of the file.
    Storage and database errors are logged and re-raised as
    :class:`~karaoke.backend.services.supabase_client.SupabaseError`.
    """
    form = resolve_form(form, filename)
    file_type = validate_file(filename, len(data))
    file_name = storage_name(filename)
    content_type = mimetypes.guess_type(filename)[0] or "application/octet-stream"

    def _on_chunk(loaded: int, total: int):
        if progress and total:
            progress(loaded / total * 100)

    logger.info(f"[upload] {user.id} uploading '{filename}' ({len(data)} bytes) as {file_name}")
    try:
        client.upload(
            bucket,
            file_name,
            data,
            content_type=content_type,
            cache_control="3600",
            upsert=False,
            progress=_on_chunk,
        )
        record = build_song_record(
            form,
            file_url=client.public_url(bucket, file_name),
            file_name=file_name,
            file_type=file_type,
            file_size=len(data),
            user=user,
            is_admin=is_admin,
        )
        song = SongService(client).create_song(record.model_dump())
    except Exception as e:
        logger.error(f"[upload] Upload failed for '{filename}': {e}")
        raise

    logger.info(f"[upload] Stored song '{record.title}' with status {record.status}")
    return UploadResult(song=song, message=success_message(record.title, is_admin))
