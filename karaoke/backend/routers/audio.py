"""Audio router: serve synthesized vocal segments."""

import os

from fastapi import APIRouter, HTTPException
from fastapi.responses import FileResponse

from karaoke.backend.services.audio_store import audio_store

router = APIRouter()


@router.get("/files/{file_id}")
def serve_audio(file_id: str):
    entry = audio_store.get_file(file_id)
    if not entry or not os.path.exists(entry.path):
        raise HTTPException(404, "Audio file not found")
    return FileResponse(entry.path, filename=entry.filename)
