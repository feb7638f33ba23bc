from __future__ import annotations

import json
import os
import tempfile
import time
from typing import Any, Dict, List

import httpx
import pytest

os.environ.setdefault("KARAOKE_TEMP_DIR", tempfile.mkdtemp(prefix="karaoke-test-"))

from karaoke.backend.schemas.auth import AuthUser
from karaoke.backend.services.ai_providers import FallbackChain, PlayAIVoice, ProviderError, TextProvider
from karaoke.backend.services.audio_store import AudioStore
from karaoke.backend.services.supabase_client import SupabaseClient
from karaoke.backend.services.task_manager import TaskManager

SUPABASE_URL = "https://project.supabase.co"

USERS = {
    "admin-token": {"id": "admin-1", "email": "admin@karaoke.id", "app_metadata": {"role": "admin"}},
    "user-token": {"id": "user-1", "email": "budi@karaoke.id", "user_metadata": {"full_name": "Budi Santoso"}},
}


class FakeSupabase:
    """In-memory stand-in for the PostgREST, Storage and Auth endpoints."""

    def __init__(self):
        self.tables: Dict[str, List[Dict[str, Any]]] = {}
        self.objects: Dict[str, bytes] = {}
        self.requests: List[httpx.Request] = []
        self.fail: Dict[str, int] = {}  # path prefix -> status code

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    def client(self) -> SupabaseClient:
        return SupabaseClient(SUPABASE_URL, "service-key", transport=self.transport())

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        for prefix, status in self.fail.items():
            if path.startswith(prefix):
                return httpx.Response(status, json={"message": f"forced failure on {prefix}"})

        if path.startswith("/rest/v1/"):
            table = path[len("/rest/v1/"):]
            if request.method == "GET":
                return httpx.Response(200, json=self._select(table, request.url.params))
            if request.method == "POST":
                rows = json.loads(request.content)
                inserted = []
                for row in rows:
                    row = {"id": f"{table}-{len(self.tables.get(table, [])) + 1}", **row}
                    self.tables.setdefault(table, []).append(row)
                    inserted.append(row)
                return httpx.Response(201, json=inserted)

        if path.startswith("/storage/v1/object/"):
            key = path[len("/storage/v1/object/"):]
            self.objects[key] = request.content
            return httpx.Response(200, json={"Key": key})

        if path == "/auth/v1/user":
            token = request.headers["authorization"].split(" ", 1)[1]
            if token not in USERS:
                return httpx.Response(401, json={"message": "invalid JWT"})
            return httpx.Response(200, json=USERS[token])

        return httpx.Response(404, json={"message": "not found"})

    def _select(self, table: str, params: httpx.QueryParams) -> List[Dict[str, Any]]:
        rows = list(self.tables.get(table, []))
        for key, value in params.multi_items():
            if value.startswith("eq."):
                rows = [r for r in rows if str(r.get(key)) == value[3:]]
        if "order" in params:
            column, _, direction = params["order"].partition(".")
            rows.sort(key=lambda r: r.get(column) or 0, reverse=direction == "desc")
        if "limit" in params:
            rows = rows[:int(params["limit"])]
        return rows


class StaticText(TextProvider):
    """Text provider answering with a canned reply, or failing when reply is None."""

    def __init__(self, name: str, reply: str = None):
        super().__init__(api_key="test", base_url="http://unused")
        self.name = name
        self.reply = reply
        self.prompts: List[str] = []

    def complete(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self.reply is None:
            raise ProviderError(self.name, "unavailable")
        return self.reply


class StaticVoice(PlayAIVoice):
    def __init__(self, audio: bytes = None):
        super().__init__(api_key="test", base_url="http://unused")
        self.audio = audio
        self.calls: List[Dict[str, Any]] = []

    def synthesize(self, text, voice, speed=1.0, emotion="neutral"):
        self.calls.append({"text": text, "voice": voice, "speed": speed, "emotion": emotion})
        if self.audio is None:
            raise ProviderError(self.name, "unavailable")
        return self.audio


def failing_chain() -> FallbackChain:
    return FallbackChain([StaticText("groq"), StaticText("gemini"), StaticText("openrouter")])


def wait_for_task(manager: TaskManager, task_id: str, timeout: float = 5.0):
    deadline = time.time() + timeout
    while time.time() < deadline:
        task = manager.get_task(task_id)
        if task and task.finished_at is not None:
            return task
        time.sleep(0.01)
    raise AssertionError(f"task {task_id} did not finish in {timeout}s")


@pytest.fixture()
def fake_supabase() -> FakeSupabase:
    return FakeSupabase()


@pytest.fixture()
def supabase(fake_supabase: FakeSupabase) -> SupabaseClient:
    client = fake_supabase.client()
    yield client
    client.close()


@pytest.fixture()
def store(tmp_path) -> AudioStore:
    return AudioStore(directory=str(tmp_path / "audio"), ttl_hours=1)


@pytest.fixture()
def contributor() -> AuthUser:
    return AuthUser.model_validate(USERS["user-token"])


@pytest.fixture()
def admin_user() -> AuthUser:
    return AuthUser.model_validate(USERS["admin-token"])
