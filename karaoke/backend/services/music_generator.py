"""AI music generator: lyrics, melody, vocals and instrumental produced stage by stage.

Every stage asks its providers in a fixed order and, when none of them
delivers, substitutes a deterministic stand-in so a generation request
always yields a complete song description. Only the final mix stage may
raise. Nothing renders or mixes real audio yet: the instrumental and the
mix are descriptive records pointing at whatever earlier stages produced.
"""

from __future__ import annotations

import json
import re
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from loguru import logger
from pydantic import ValidationError

from karaoke.backend.schemas.generator import (
    GeneratedSong,
    GenerationOptions,
    InstrumentalTrack,
    LyricLine,
    Lyrics,
    MelodyStructure,
    SongMetadata,
    SongTracks,
    VocalSegment,
    VocalTrack,
)
from karaoke.backend.services.ai_providers import (
    FallbackChain,
    PlayAIVoice,
    ProviderError,
    default_text_chain,
    default_voice,
)
from karaoke.backend.services.audio_store import AudioStore, audio_store

ProgressCallback = Callable[[float, str], None]

TEXT_LINE_SECONDS = 4
DEFAULT_INSTRUMENTAL_SECONDS = 180
FALLBACK_INSTRUMENTAL_SECONDS = 32

TEMPO_BPM = {"fast": 140, "slow": 80}
DEFAULT_BPM = 120
DEFAULT_KEY = "C Major"
DEFAULT_CHORDS = ["C", "G", "Am", "F"]

INSTRUMENTS = {
    "pop": ["piano", "guitar", "bass", "drums", "synth"],
    "rock": ["electric_guitar", "bass_guitar", "drums", "keyboard"],
    "dangdut": ["kendang", "suling", "gitar", "keyboard", "bass"],
    "jazz": ["piano", "trumpet", "saxophone", "bass", "drums"],
    "electronic": ["synthesizer", "drum_machine", "bass_synth", "pad"],
}

_CODE_FENCE = re.compile(r"```[a-zA-Z]*[ \t]*\n(.*?)\n?```", re.DOTALL)

LYRICS_PROMPT = """Generate {language} karaoke song lyrics for: "{prompt}"

Requirements:
- Genre: {genre}
- Mood: {mood}
- Language: {language}
- Structure: Verse 1, Chorus, Verse 2, Chorus, Bridge, Chorus
- Include timestamps for karaoke synchronization
- Make it catchy and singable
- Each line should be 4-8 seconds long

Format as JSON with structure:
{{
  "title": "Song Title",
  "structure": [
    {{"section": "verse1", "time": 0, "text": "Lyric line", "duration": 4}},
    ...
  ]
}}"""

MELODY_PROMPT = """Create a melody structure for these lyrics in {genre} style:

Lyrics: {lyrics}

Generate:
- Chord progressions for each section
- Melody notes and timing
- Key signature
- Tempo: {tempo}
- Arrangement instructions

Return as JSON structure."""


def get_instruments_for_genre(genre: str) -> List[str]:
    return list(INSTRUMENTS.get(genre.lower(), INSTRUMENTS["pop"]))


def tempo_to_bpm(tempo: str) -> int:
    return TEMPO_BPM.get(tempo.lower(), DEFAULT_BPM)


def strip_code_fence(text: str) -> str:
    """Body of the first fenced block anywhere in the reply, or the whole reply."""
    match = _CODE_FENCE.search(text)
    return match.group(1).strip() if match else text.strip()


def parse_text_lyrics(text: str) -> Lyrics:
    """Turn plain lyric lines into a timed structure, four seconds per line."""
    lines = [line.strip() for line in text.split("\n") if line.strip()]
    structure = []
    for index, line in enumerate(lines):
        if index < 4:
            section = "verse1"
        elif index < 8:
            section = "chorus"
        else:
            section = "verse2"
        structure.append(LyricLine(
            section=section,
            time=index * TEXT_LINE_SECONDS,
            text=line,
            duration=TEXT_LINE_SECONDS,
        ))
    return Lyrics(title="AI Generated Song", structure=structure)


def parse_lyrics_response(response: str) -> Lyrics:
    """Parse a model reply as lyrics JSON, or as plain lines when it is not JSON.

    Raises ValueError when the reply is JSON of the wrong shape or holds no lines.
    """
    body = strip_code_fence(response)
    try:
        parsed = json.loads(body)
    except json.JSONDecodeError:
        lyrics = parse_text_lyrics(body)
    else:
        try:
            lyrics = Lyrics.model_validate(parsed)
        except ValidationError as e:
            raise ValueError(f"reply is not a lyrics document: {e.error_count()} errors") from e
    if not lyrics.structure:
        raise ValueError("reply contains no lyric lines")
    return lyrics


def default_melody_structure() -> MelodyStructure:
    return MelodyStructure(
        total_duration=FALLBACK_INSTRUMENTAL_SECONDS,
        key_signature=DEFAULT_KEY,
        tempo=DEFAULT_BPM,
        chord_progression=list(DEFAULT_CHORDS),
    )


def parse_melody_structure(response: str, lyrics: Lyrics) -> MelodyStructure:
    """Read the model's melody JSON; anything unreadable becomes the default melody.

    The result always follows the lyrics timeline. A ``structure`` the model
    returned is kept under ``sections``.
    """
    try:
        parsed = json.loads(strip_code_fence(response))
    except json.JSONDecodeError:
        parsed = None
    if not isinstance(parsed, dict):
        melody = default_melody_structure()
    else:
        sections = parsed.pop("structure", None)
        if sections is not None:
            parsed.setdefault("sections", sections)
        if "totalDuration" not in parsed and "total_duration" not in parsed:
            parsed["total_duration"] = lyrics.total_duration
        try:
            melody = MelodyStructure.model_validate(parsed)
        except ValidationError:
            logger.warning("[generator] Melody reply has unusable fields, using default melody")
            melody = default_melody_structure()
    melody.structure = list(lyrics.structure)
    return melody


def fallback_lyrics(prompt: str) -> Lyrics:
    lines = [
        ("verse1", f"Cerita tentang {prompt}"),
        ("verse1", "Di dalam hati ku"),
        ("chorus", f"{prompt} selalu di hati"),
        ("chorus", "Takkan pernah terlupakan"),
        ("verse2", "Melodi indah tercipta"),
        ("verse2", "Dari AI yang cerdas"),
        ("chorus", f"{prompt} selalu di hati"),
        ("chorus", "Takkan pernah terlupakan"),
    ]
    return Lyrics(
        title=f"Lagu untuk {prompt}",
        structure=[
            LyricLine(section=section, time=i * TEXT_LINE_SECONDS, text=text, duration=TEXT_LINE_SECONDS)
            for i, (section, text) in enumerate(lines)
        ],
    )


def fallback_vocal_track(lyrics: Lyrics) -> VocalTrack:
    return VocalTrack(
        segments=[
            VocalSegment(audio_id=None, start_time=line.time, duration=line.duration, text=line.text)
            for line in lyrics.structure
        ],
        total_duration=lyrics.total_duration,
    )


def fallback_melody_structure(lyrics: Lyrics, options: GenerationOptions) -> MelodyStructure:
    return MelodyStructure(
        total_duration=lyrics.total_duration,
        key_signature=DEFAULT_KEY,
        tempo=tempo_to_bpm(options.tempo),
        chord_progression=list(DEFAULT_CHORDS),
        structure=list(lyrics.structure),
    )


def fallback_instrumental(options: GenerationOptions) -> InstrumentalTrack:
    return InstrumentalTrack(
        structure=MelodyStructure(total_duration=FALLBACK_INSTRUMENTAL_SECONDS),
        instruments=get_instruments_for_genre(options.genre),
        genre=options.genre,
        tempo=options.tempo,
        duration=FALLBACK_INSTRUMENTAL_SECONDS,
    )


def voice_config(options: GenerationOptions) -> Dict[str, Any]:
    return {
        "voice_id": "indonesian_singer" if options.language.lower() == "indonesia" else "english_singer",
        "style": options.style,
        "speed": 1.0,
        "emotion": "neutral",
    }


class AIMusicGenerator:
    """Sequential lyrics → melody → vocals → instrumental → mix pipeline.

    ``is_generating`` is true while :meth:`generate_song` runs. Providers are
    called one at a time; a stage never starts before the previous one has
    returned.
    """

    def __init__(
        self,
        text_chain: Optional[FallbackChain] = None,
        voice: Optional[PlayAIVoice] = None,
        store: Optional[AudioStore] = None,
    ):
        self.text_chain = text_chain if text_chain is not None else default_text_chain()
        self.voice = voice if voice is not None else default_voice()
        self.store = store if store is not None else audio_store
        self.is_generating = False

    def generate_song(
        self,
        prompt: str,
        options: Optional[GenerationOptions] = None,
        progress: Optional[ProgressCallback] = None,
    ) -> GeneratedSong:
        options = options or GenerationOptions()

        def report(value: float, message: str):
            if progress:
                progress(value, message)

        try:
            self.is_generating = True
            logger.info(f"[generator] Starting generation for '{prompt}' ({options.model_dump()})")

            lyrics = self.generate_lyrics(prompt, options)
            report(0.2, "Lyrics ready")

            melody = self.generate_melody_structure(lyrics, options)
            report(0.4, "Melody structure ready")

            vocals = self.generate_vocal_track(lyrics, options)
            report(0.7, "Vocal track ready")

            instrumental = self.generate_instrumental(melody, options)
            report(0.85, "Instrumental track ready")

            song = self.mix_tracks(vocals, instrumental, lyrics, options.duration)
            report(1.0, "Tracks mixed")

            logger.info(f"[generator] Generation completed: '{song.lyrics.title}'")
            return song
        except Exception:
            logger.exception("[generator] Music generation failed")
            raise
        finally:
            self.is_generating = False

    def generate_lyrics(self, prompt: str, options: GenerationOptions) -> Lyrics:
        lyrics_prompt = LYRICS_PROMPT.format(
            prompt=prompt, genre=options.genre, mood=options.mood, language=options.language,
        )
        try:
            return parse_lyrics_response(self.text_chain.complete(lyrics_prompt))
        except (ProviderError, ValueError) as e:
            logger.error(f"[generator] Lyrics generation failed, using fallback lyrics: {e}")
            return fallback_lyrics(prompt)

    def generate_melody_structure(self, lyrics: Lyrics, options: GenerationOptions) -> MelodyStructure:
        timeline = json.dumps([line.model_dump() for line in lyrics.structure], ensure_ascii=False)
        structure_prompt = MELODY_PROMPT.format(genre=options.genre, lyrics=timeline, tempo=options.tempo)
        try:
            response = self.text_chain.complete(structure_prompt)
        except ProviderError as e:
            logger.error(f"[generator] Melody structure generation failed, using fallback: {e}")
            return fallback_melody_structure(lyrics, options)
        return parse_melody_structure(response, lyrics)

    def synthesize_voice(self, text: str, config: Dict[str, Any]) -> Optional[bytes]:
        """Synthesized audio for one line, or None when the voice provider failed."""
        try:
            return self.voice.synthesize(
                text, voice=config["voice_id"], speed=config["speed"], emotion=config["emotion"],
            )
        except ProviderError as e:
            logger.warning(f"[generator] Voice synthesis failed, segment left silent: {e.message}")
            return None

    def generate_vocal_track(self, lyrics: Lyrics, options: GenerationOptions) -> VocalTrack:
        config = voice_config(options)
        logger.info(f"[generator] Generating vocal track with voice {config['voice_id']}")
        try:
            segments = []
            for line in lyrics.structure:
                try:
                    audio = self.synthesize_voice(line.text, config)
                    audio_id = self.store.store_bytes(audio, "vocal.wav").id if audio else None
                except OSError as e:
                    logger.warning(f'[generator] Failed to synthesize: "{line.text}": {e}')
                    continue
                segments.append(VocalSegment(
                    audio_id=audio_id,
                    start_time=line.time,
                    duration=line.duration,
                    text=line.text,
                    synthesized=audio_id is not None,
                ))
            return VocalTrack(segments=segments, total_duration=lyrics.total_duration)
        except Exception as e:
            logger.error(f"[generator] Vocal track generation failed, using fallback: {e}")
            return fallback_vocal_track(lyrics)

    def generate_instrumental(self, melody: MelodyStructure, options: GenerationOptions) -> InstrumentalTrack:
        logger.info(f"[generator] Generating instrumental track ({options.genre}, {options.tempo})")
        try:
            return InstrumentalTrack(
                structure=melody,
                instruments=get_instruments_for_genre(options.genre),
                genre=options.genre,
                tempo=options.tempo,
                duration=melody.total_duration or DEFAULT_INSTRUMENTAL_SECONDS,
            )
        except ValidationError as e:
            logger.error(f"[generator] Instrumental generation failed, using fallback: {e}")
            return fallback_instrumental(options)

    def mix_tracks(
        self,
        vocals: VocalTrack,
        instrumental: InstrumentalTrack,
        lyrics: Lyrics,
        duration: float,
    ) -> GeneratedSong:
        logger.info("[generator] Mixing tracks")
        return GeneratedSong(
            audio_url=None,
            lyrics=lyrics,
            duration=duration,
            tracks=SongTracks(vocals=vocals, instrumental=instrumental),
            metadata=SongMetadata(generated_at=datetime.now(timezone.utc).isoformat()),
        )


_generator: Optional[AIMusicGenerator] = None


def get_music_generator() -> AIMusicGenerator:
    global _generator
    if _generator is None:
        _generator = AIMusicGenerator()
    return _generator
