"""Songs router: community upload, upload options, public gallery."""

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile

from karaoke.backend.dependencies import get_current_user, get_supabase, is_admin
from karaoke.backend.schemas.auth import AuthUser
from karaoke.backend.schemas.common import ApiResponse
from karaoke.backend.schemas.songs import (
    ALLOWED_EXTENSIONS,
    DIFFICULTIES,
    GENRES,
    LANGUAGES,
    SongForm,
    SongListResponse,
    SongOptionsResponse,
)
from karaoke.backend import config
from karaoke.backend.services.database import SongService
from karaoke.backend.services.song_upload import UploadValidationError, resolve_form, upload_song, validate_file
from karaoke.backend.services.supabase_client import SupabaseClient, SupabaseError
from karaoke.backend.services.task_manager import task_manager

router = APIRouter()


@router.get("/options")
def upload_options():
    """Choices offered by the upload form."""
    return ApiResponse(data=SongOptionsResponse(
        genres=GENRES,
        difficulties=DIFFICULTIES,
        languages=LANGUAGES,
        allowed_extensions=ALLOWED_EXTENSIONS,
        max_upload_mb=config.MAX_UPLOAD_MB,
    ))


@router.get("")
def list_songs(supabase: SupabaseClient = Depends(get_supabase)):
    """Approved songs in the public gallery."""
    try:
        songs = SongService(supabase).get_approved_songs()
    except SupabaseError as e:
        raise HTTPException(502, f"Gagal memuat lagu: {e.message}")
    return ApiResponse(data=SongListResponse(songs=songs, total=len(songs)))


@router.get("/{song_id}")
def get_song(song_id: str, supabase: SupabaseClient = Depends(get_supabase)):
    try:
        song = SongService(supabase).get_song(song_id)
    except SupabaseError as e:
        raise HTTPException(502, f"Gagal memuat lagu: {e.message}")
    if not song:
        raise HTTPException(404, "Song not found")
    return ApiResponse(data=song)


@router.post("/upload")
async def upload(
    file: UploadFile = File(...),
    title: str = Form(""),
    artist: str = Form(""),
    genre: str = Form("Pop"),
    difficulty: str = Form("Medium"),
    language: str = Form("Indonesia"),
    user: AuthUser = Depends(get_current_user),
    supabase: SupabaseClient = Depends(get_supabase),
):
    """Validate the submission, then transfer the file in the background.

    Returns the task id; progress is the transferred percentage of the file.
    """
    filename = file.filename or ""
    form = SongForm(title=title, artist=artist, genre=genre, difficulty=difficulty, language=language)
    try:
        form = resolve_form(form, filename)
        # Reject by the declared size before the body is pulled into memory
        validate_file(filename, file.size or 0)
        data = await file.read()
        if file.size is None:
            validate_file(filename, len(data))
    except UploadValidationError as e:
        raise HTTPException(400, str(e))

    admin = is_admin(user)

    def _run(task_id):
        def progress_cb(percent: float):
            task_manager.update_progress(task_id, percent / 100, f"{percent:.1f}%")

        try:
            result = upload_song(supabase, form, filename, data, user, admin, progress=progress_cb)
        except SupabaseError as e:
            raise RuntimeError(f"❌ Upload gagal: {e.message}") from e
        return result.model_dump()

    task_id = task_manager.submit("upload", _run)
    return ApiResponse(data={"task_id": task_id, "status": "approved" if admin else "pending"})
