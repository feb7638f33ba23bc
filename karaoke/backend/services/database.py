"""Record services for songs, performances and tournaments stored in Supabase."""

from typing import Any, Dict, List, Optional

from karaoke.backend import config
from karaoke.backend.services.supabase_client import SupabaseClient

PERFORMANCES_TABLE = "performances"
TOURNAMENTS_TABLE = "tournaments"


class SongService:
    def __init__(self, client: SupabaseClient, table: str = config.SONGS_TABLE):
        self.client = client
        self.table = table

    def get_all_songs(self) -> List[Dict[str, Any]]:
        """Every song record, newest upload first, regardless of approval status."""
        return self.client.select(self.table, order="uploaded_at", desc=True)

    def get_approved_songs(self) -> List[Dict[str, Any]]:
        return self.client.select(
            self.table, filters={"status": "approved"}, order="uploaded_at", desc=True,
        )

    def get_song(self, song_id: str) -> Optional[Dict[str, Any]]:
        rows = self.client.select(self.table, filters={"id": song_id}, limit=1)
        return rows[0] if rows else None

    def create_song(self, record: Dict[str, Any]) -> Dict[str, Any]:
        return self.client.insert_single(self.table, record)


class PerformanceService:
    def __init__(self, client: SupabaseClient):
        self.client = client

    def get_leaderboard(self, limit: int = 10) -> List[Dict[str, Any]]:
        return self.client.select(PERFORMANCES_TABLE, order="score", desc=True, limit=limit)


class TournamentService:
    def __init__(self, client: SupabaseClient):
        self.client = client

    def get_tournaments(self) -> List[Dict[str, Any]]:
        return self.client.select(TOURNAMENTS_TABLE, order="created_at", desc=True)

    def get_active_tournaments(self) -> List[Dict[str, Any]]:
        return self.client.select(
            TOURNAMENTS_TABLE, filters={"status": "active"}, order="created_at", desc=True,
        )
