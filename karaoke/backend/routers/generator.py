"""Generator router: AI song generation, lyrics-only preview, task status."""

from fastapi import APIRouter, Depends, HTTPException

from karaoke.backend.dependencies import get_generator
from karaoke.backend.schemas.common import ApiResponse, TaskStatusResponse
from karaoke.backend.schemas.generator import (
    GenerateRequest,
    GenerationOptions,
    GeneratorStatus,
    LyricsRequest,
)
from karaoke.backend.services.music_generator import AIMusicGenerator
from karaoke.backend.services.task_manager import task_manager

router = APIRouter()


@router.post("/generate")
def start_generation(req: GenerateRequest, generator: AIMusicGenerator = Depends(get_generator)):
    if not req.prompt.strip():
        raise HTTPException(400, "Prompt is required")

    def _run(task_id):
        def progress_cb(value: float, message: str = ""):
            task_manager.update_progress(task_id, value, message)

        song = generator.generate_song(req.prompt, req.options, progress=progress_cb)
        return song.model_dump(mode="json")

    task_id = task_manager.submit("generation", _run)
    return ApiResponse(data={"task_id": task_id})


@router.get("/task/{task_id}")
def get_task_status(task_id: str):
    task = task_manager.get_task(task_id)
    if not task:
        raise HTTPException(404, "Task not found")
    return ApiResponse(data=TaskStatusResponse(
        task_id=task.id,
        kind=task.kind,
        status=task.status.value,
        progress=task.progress,
        message=task.message,
        result=task.result,
        error=task.error,
    ))


@router.get("/status")
def generator_status(generator: AIMusicGenerator = Depends(get_generator)):
    return ApiResponse(data=GeneratorStatus(
        is_generating=generator.is_generating,
        active_tasks=task_manager.active_count("generation"),
        text_providers={p.name: p.configured for p in generator.text_chain.providers},
        voice_provider={generator.voice.name: generator.voice.configured},
    ))


@router.post("/lyrics")
def generate_lyrics(req: LyricsRequest, generator: AIMusicGenerator = Depends(get_generator)):
    """Run the lyrics stage alone; falls back to template lyrics like a full generation."""
    if not req.prompt.strip():
        raise HTTPException(400, "Prompt is required")
    options = GenerationOptions(genre=req.genre, language=req.language, mood=req.mood)
    return ApiResponse(data=generator.generate_lyrics(req.prompt, options))
