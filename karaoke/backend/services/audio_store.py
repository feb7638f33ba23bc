"""Temporary store for synthesized vocal audio, with UUID-based IDs and TTL cleanup."""

from __future__ import annotations

import os
import threading
import time
import uuid
from dataclasses import dataclass, field
from typing import Dict, Optional

from loguru import logger

from karaoke.backend import config

CLEANUP_INTERVAL_SECONDS = 600


@dataclass
class AudioFile:
    id: str
    path: str
    filename: str
    size: int
    created_at: float = field(default_factory=time.time)


class AudioStore:
    """Keeps generated audio segments on disk until they expire."""

    def __init__(self, directory: Optional[str] = None, ttl_hours: Optional[int] = None):
        self._dir = directory or config.TEMP_DIR
        self._ttl_seconds = (ttl_hours if ttl_hours is not None else config.AUDIO_TTL_HOURS) * 3600
        self._files: Dict[str, AudioFile] = {}
        self._lock = threading.Lock()
        self._stop = threading.Event()
        self._cleanup_thread: Optional[threading.Thread] = None
        os.makedirs(self._dir, exist_ok=True)

    @property
    def temp_dir(self) -> str:
        return self._dir

    def store_bytes(self, data: bytes, filename: str) -> AudioFile:
        file_id = uuid.uuid4().hex[:12]
        ext = os.path.splitext(filename)[1] or ".wav"
        dest = os.path.join(self._dir, f"{file_id}{ext}")
        with open(dest, "wb") as f:
            f.write(data)
        entry = AudioFile(id=file_id, path=dest, filename=filename, size=len(data))
        with self._lock:
            self._files[file_id] = entry
        return entry

    def get_file(self, file_id: str) -> Optional[AudioFile]:
        with self._lock:
            return self._files.get(file_id)

    def start_cleanup(self):
        self._stop.clear()
        self._cleanup_thread = threading.Thread(target=self._cleanup_loop, daemon=True)
        self._cleanup_thread.start()

    def stop_cleanup(self):
        self._stop.set()

    def _cleanup_loop(self):
        while not self._stop.is_set():
            try:
                self.cleanup_expired()
            except OSError as e:
                logger.error(f"[audio] Cleanup error: {e}")
            self._stop.wait(CLEANUP_INTERVAL_SECONDS)

    def cleanup_expired(self, now: Optional[float] = None) -> int:
        now = time.time() if now is None else now
        with self._lock:
            expired = [fid for fid, entry in self._files.items()
                       if now - entry.created_at > self._ttl_seconds]
            for fid in expired:
                entry = self._files.pop(fid)
                try:
                    os.remove(entry.path)
                except FileNotFoundError:
                    pass
        if expired:
            logger.info(f"[audio] Cleaned up {len(expired)} expired audio files")
        return len(expired)


audio_store = AudioStore()
