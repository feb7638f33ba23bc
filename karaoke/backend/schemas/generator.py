"""Schemas for the AI music generator: request options and the records passed between stages."""

from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field


class GenerationOptions(BaseModel):
    genre: str = "pop"
    duration: int = 180  # seconds
    style: str = "karaoke"
    language: str = "indonesia"
    mood: str = "happy"
    tempo: str = "medium"  # "slow", "medium", "fast"


class GenerateRequest(BaseModel):
    prompt: str
    options: GenerationOptions = Field(default_factory=GenerationOptions)


class LyricLine(BaseModel):
    model_config = ConfigDict(extra="ignore")

    section: str
    time: float  # start, seconds
    text: str
    duration: float


class Lyrics(BaseModel):
    model_config = ConfigDict(extra="ignore")

    title: str = "AI Generated Song"
    structure: List[LyricLine]

    @property
    def total_duration(self) -> float:
        return max((line.time + line.duration for line in self.structure), default=0.0)


class VocalSegment(BaseModel):
    audio_id: Optional[str] = None  # Stored synthesized audio, None when unavailable
    start_time: float
    duration: float
    text: str
    synthesized: bool = False


class VocalTrack(BaseModel):
    segments: List[VocalSegment] = Field(default_factory=list)
    total_duration: float = 0.0
    format: str = "wav"
    sample_rate: int = 44100


class MelodyStructure(BaseModel):
    """Melody plan; keys the text model adds beyond these are kept as-is."""
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    total_duration: float = Field(32.0, alias="totalDuration")
    key_signature: str = Field("C Major", alias="keySignature")
    tempo: Any = 120
    chord_progression: Any = Field(default_factory=lambda: ["C", "G", "Am", "F"], alias="chordProgression")
    structure: List[LyricLine] = Field(default_factory=list)


class InstrumentalTrack(BaseModel):
    audio_url: Optional[str] = None  # No instrumental rendering yet
    midi_data: Optional[str] = None
    structure: MelodyStructure
    instruments: List[str] = Field(default_factory=list)
    genre: str = "pop"
    tempo: str = "medium"
    duration: float = 0.0


class SongTracks(BaseModel):
    vocals: VocalTrack
    instrumental: InstrumentalTrack


class SongMetadata(BaseModel):
    generated_at: str
    version: str = "1.0"
    format: str = "mp3"
    quality: str = "high"


class GeneratedSong(BaseModel):
    audio_url: Optional[str] = None  # No mixing yet, nothing to serve
    lyrics: Lyrics
    duration: float
    tracks: SongTracks
    metadata: SongMetadata


class LyricsRequest(BaseModel):
    prompt: str
    genre: str = "pop"
    language: str = "indonesia"
    mood: str = "happy"


class GeneratorStatus(BaseModel):
    is_generating: bool = False
    active_tasks: int = 0
    text_providers: Dict[str, bool] = Field(default_factory=dict)
    voice_provider: Dict[str, bool] = Field(default_factory=dict)
