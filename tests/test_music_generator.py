import json

import pytest

from karaoke.backend.schemas.generator import GenerationOptions, LyricLine, Lyrics
from karaoke.backend.services.ai_providers import FallbackChain
from karaoke.backend.services.music_generator import (
    AIMusicGenerator,
    fallback_lyrics,
    get_instruments_for_genre,
    parse_lyrics_response,
    parse_melody_structure,
    parse_text_lyrics,
    voice_config,
)

from conftest import StaticText, StaticVoice

LYRICS_JSON = json.dumps({
    "title": "Senja di Jakarta",
    "structure": [
        {"section": "verse1", "time": 0, "text": "Langit jingga", "duration": 5},
        {"section": "chorus", "time": 5, "text": "Senja di Jakarta", "duration": 6},
    ],
})


def make_generator(store, replies=(None, None, None), audio=None):
    chain = FallbackChain([StaticText(name, reply) for name, reply in zip(("groq", "gemini", "openrouter"), replies)])
    return AIMusicGenerator(text_chain=chain, voice=StaticVoice(audio), store=store)


def test_all_providers_failing_still_yields_complete_song(store):
    generator = make_generator(store)
    progress = []

    song = generator.generate_song("Pantai", progress=lambda value, message: progress.append(value))

    assert song.lyrics.title == "Lagu untuk Pantai"
    assert len(song.lyrics.structure) == 8
    assert [line.time for line in song.lyrics.structure] == [0, 4, 8, 12, 16, 20, 24, 28]
    assert song.lyrics.structure[2].text == "Pantai selalu di hati"

    melody = song.tracks.instrumental.structure
    assert melody.total_duration == 32
    assert melody.key_signature == "C Major"
    assert melody.tempo == 120
    assert melody.chord_progression == ["C", "G", "Am", "F"]
    assert len(melody.structure) == 8

    vocals = song.tracks.vocals
    assert len(vocals.segments) == 8
    assert all(s.audio_id is None and not s.synthesized for s in vocals.segments)
    assert vocals.total_duration == 32
    assert vocals.format == "wav" and vocals.sample_rate == 44100

    assert song.tracks.instrumental.instruments == ["piano", "guitar", "bass", "drums", "synth"]
    assert song.audio_url is None
    assert song.duration == 180
    assert song.metadata.version == "1.0"
    assert song.metadata.format == "mp3"
    assert progress == [0.2, 0.4, 0.7, 0.85, 1.0]
    assert generator.is_generating is False


def test_lyrics_from_first_answering_provider(store):
    generator = make_generator(store, replies=(None, f"```json\n{LYRICS_JSON}\n```", "unused"))

    lyrics = generator.generate_lyrics("senja", GenerationOptions(language="english", mood="sad"))

    assert lyrics.title == "Senja di Jakarta"
    assert [line.text for line in lyrics.structure] == ["Langit jingga", "Senja di Jakarta"]
    assert lyrics.total_duration == 11
    groq_prompt = generator.text_chain.providers[0].prompts[0]
    assert 'Generate english karaoke song lyrics for: "senja"' in groq_prompt
    assert "- Mood: sad" in groq_prompt


def test_plain_text_reply_is_timed_line_by_line():
    text = "\n".join(f"baris {i}" for i in range(1, 10)) + "\n\n"

    lyrics = parse_text_lyrics(text)

    assert lyrics.title == "AI Generated Song"
    assert [line.section for line in lyrics.structure] == ["verse1"] * 4 + ["chorus"] * 4 + ["verse2"]
    assert [line.time for line in lyrics.structure] == [i * 4 for i in range(9)]
    assert {line.duration for line in lyrics.structure} == {4}


@pytest.mark.parametrize("reply", ['{"title": "no lines"}', '"just a string"', "  \n \n", '{"structure": []}'])
def test_unusable_lyrics_replies_are_rejected(reply):
    with pytest.raises(ValueError):
        parse_lyrics_response(reply)


def test_unusable_lyrics_reply_falls_back(store):
    generator = make_generator(store, replies=('{"title": "no lines"}', None, None))

    lyrics = generator.generate_lyrics("Bulan", GenerationOptions())

    assert lyrics == fallback_lyrics("Bulan")


@pytest.mark.parametrize("tempo,bpm", [("fast", 140), ("slow", 80), ("medium", 120), ("Fast", 140)])
def test_melody_fallback_tempo(store, tempo, bpm):
    generator = make_generator(store)
    lyrics = parse_text_lyrics("a\nb\nc")

    melody = generator.generate_melody_structure(lyrics, GenerationOptions(tempo=tempo))

    assert melody.tempo == bpm
    assert melody.total_duration == 12
    assert melody.structure == lyrics.structure


def test_melody_reply_is_parsed_onto_lyrics_timeline():
    lyrics = parse_text_lyrics("a\nb")
    reply = json.dumps({
        "keySignature": "G Major",
        "tempo": 96,
        "chordProgression": {"verse1": ["G", "D"]},
        "structure": [{"section": "intro", "bars": 4}],
        "arrangement": "acoustic intro",
    })

    melody = parse_melody_structure(reply, lyrics)

    assert melody.key_signature == "G Major"
    assert melody.tempo == 96
    assert melody.chord_progression == {"verse1": ["G", "D"]}
    assert melody.total_duration == 8
    assert melody.structure == lyrics.structure
    dumped = melody.model_dump()
    assert dumped["sections"] == [{"section": "intro", "bars": 4}]
    assert dumped["arrangement"] == "acoustic intro"


def test_non_json_melody_reply_uses_default_melody():
    melody = parse_melody_structure("Use a I-V-vi-IV progression", parse_text_lyrics("a"))

    assert melody.total_duration == 32
    assert melody.tempo == 120
    assert melody.chord_progression == ["C", "G", "Am", "F"]


def test_vocal_track_stores_synthesized_segments(store):
    generator = make_generator(store, audio=b"RIFFdata")
    lyrics = Lyrics(structure=[
        LyricLine(section="verse1", time=0, text="Satu", duration=4),
        LyricLine(section="verse1", time=4, text="Dua", duration=6),
    ])

    track = generator.generate_vocal_track(lyrics, GenerationOptions(language="Indonesia"))

    assert track.total_duration == 10
    assert [s.text for s in track.segments] == ["Satu", "Dua"]
    assert all(s.synthesized for s in track.segments)
    entry = store.get_file(track.segments[0].audio_id)
    with open(entry.path, "rb") as f:
        assert f.read() == b"RIFFdata"
    assert generator.voice.calls[0]["voice"] == "indonesian_singer"


def test_voice_selection_by_language():
    assert voice_config(GenerationOptions(language="indonesia"))["voice_id"] == "indonesian_singer"
    assert voice_config(GenerationOptions(language="english"))["voice_id"] == "english_singer"
    assert voice_config(GenerationOptions(style="duet"))["style"] == "duet"


def test_vocal_track_for_empty_lyrics(store):
    track = make_generator(store).generate_vocal_track(Lyrics(structure=[]), GenerationOptions())

    assert track.segments == []
    assert track.total_duration == 0


def test_instrumental_uses_genre_and_melody_duration(store):
    generator = make_generator(store)
    lyrics = parse_text_lyrics("a\nb")
    melody = generator.generate_melody_structure(lyrics, GenerationOptions())

    track = generator.generate_instrumental(melody, GenerationOptions(genre="Dangdut", tempo="fast"))

    assert track.instruments == ["kendang", "suling", "gitar", "keyboard", "bass"]
    assert track.duration == 8
    assert track.audio_url is None and track.midi_data is None


def test_unknown_genre_gets_pop_instruments():
    assert get_instruments_for_genre("polka") == get_instruments_for_genre("pop")


def test_mix_failure_propagates_and_resets_flag(store, monkeypatch):
    generator = make_generator(store)

    def broken_mix(*args, **kwargs):
        raise RuntimeError("mixer offline")

    monkeypatch.setattr(generator, "mix_tracks", broken_mix)

    with pytest.raises(RuntimeError, match="mixer offline"):
        generator.generate_song("Hujan")
    assert generator.is_generating is False


def test_generation_with_working_providers(store):
    generator = make_generator(store, replies=(LYRICS_JSON, None, None), audio=b"wav")

    song = generator.generate_song("senja", GenerationOptions(duration=60, genre="jazz"))

    assert song.lyrics.title == "Senja di Jakarta"
    assert song.duration == 60
    assert song.tracks.instrumental.instruments[1] == "trumpet"
    assert all(s.audio_id for s in song.tracks.vocals.segments)


def test_progress_is_reported_once_each_stage_has_returned(store):
    generator = make_generator(store)
    groq = generator.text_chain.providers[0]
    seen = []

    generator.generate_song("Pelangi", progress=lambda value, message: seen.append((value, len(groq.prompts))))

    # lyrics prompt sent before the first report, melody prompt before the second
    assert seen[0] == (0.2, 1)
    assert seen[1] == (0.4, 2)


def test_fenced_json_after_prose_is_extracted():
    reply = f"Here are your lyrics:\n```json\n{LYRICS_JSON}\n```\nEnjoy singing!"

    lyrics = parse_lyrics_response(reply)

    assert lyrics.title == "Senja di Jakarta"
    assert [line.text for line in lyrics.structure] == ["Langit jingga", "Senja di Jakarta"]
