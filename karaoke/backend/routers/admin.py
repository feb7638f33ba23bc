"""Admin router: dashboard overview and the per-tab listings."""

from fastapi import APIRouter, Depends, HTTPException

from karaoke.backend.dependencies import get_supabase, require_admin
from karaoke.backend.schemas.common import ApiResponse
from karaoke.backend.schemas.songs import SongListResponse
from karaoke.backend.services import payment
from karaoke.backend.services.dashboard import build_dashboard
from karaoke.backend.services.database import SongService, TournamentService
from karaoke.backend.services.supabase_client import SupabaseClient, SupabaseError

router = APIRouter(dependencies=[Depends(require_admin)])


@router.get("/dashboard")
def dashboard(supabase: SupabaseClient = Depends(get_supabase)):
    return ApiResponse(data=build_dashboard(supabase))


@router.get("/songs")
def manage_songs(supabase: SupabaseClient = Depends(get_supabase)):
    """All uploads, pending review ones included."""
    try:
        songs = SongService(supabase).get_all_songs()
    except SupabaseError as e:
        raise HTTPException(502, f"Gagal memuat lagu: {e.message}")
    return ApiResponse(data=SongListResponse(songs=songs, total=len(songs)))


@router.get("/tournaments")
def manage_tournaments(supabase: SupabaseClient = Depends(get_supabase)):
    try:
        service = TournamentService(supabase)
        tournaments = service.get_tournaments()
        active = service.get_active_tournaments()
    except SupabaseError as e:
        raise HTTPException(502, f"Gagal memuat tournament: {e.message}")
    return ApiResponse(data={
        "tournaments": tournaments,
        "active": active,
        "total": len(tournaments),
    })


@router.get("/payments")
def manage_payments():
    return ApiResponse(data={
        "plans": payment.get_plans(),
        "methods": payment.get_payment_methods(),
    })


@router.get("/users")
def manage_users():
    return ApiResponse(data={
        "title": "Manajemen Users",
        "status": "coming_soon",
        "message": "Fitur manajemen users sedang dalam pengembangan",
    })
