"""Admin dashboard overview: counts from the database plus mocked figures."""

from typing import List

from loguru import logger

from karaoke.backend.schemas.admin import Activity, DashboardResponse, DashboardStats, DashboardTab
from karaoke.backend.services.database import PerformanceService, SongService
from karaoke.backend.services.payment import format_rupiah
from karaoke.backend.services.supabase_client import SupabaseClient, SupabaseError

# No user or revenue tables exist yet; the dashboard shows fixed figures.
MOCK_TOTAL_USERS = 150
MOCK_REVENUE_IDR = 2_500_000

LEADERBOARD_SAMPLE = 100

TABS = [
    DashboardTab(id="overview", label="Dashboard", icon="fas fa-chart-line"),
    DashboardTab(id="songs", label="Kelola Lagu", icon="fas fa-music"),
    DashboardTab(id="tournaments", label="Tournament", icon="fas fa-trophy"),
    DashboardTab(id="payments", label="Pembayaran", icon="fas fa-credit-card"),
    DashboardTab(id="users", label="Users", icon="fas fa-users"),
]

ACTIVITY_STYLES = {
    "song": ("fas fa-music", "#ff6b6b"),
    "user": ("fas fa-user-plus", "#feca57"),
    "tournament": ("fas fa-trophy", "#48dbfb"),
    "payment": ("fas fa-credit-card", "#ff9ff3"),
}
DEFAULT_ACTIVITY_STYLE = ("fas fa-info-circle", "#9e9e9e")


def styled_activity(type_: str, action: str, details: str, time: str) -> Activity:
    icon, color = ACTIVITY_STYLES.get(type_, DEFAULT_ACTIVITY_STYLE)
    return Activity(type=type_, action=action, details=details, time=time, icon=icon, color=color)


def recent_activity() -> List[Activity]:
    return [
        styled_activity("song", "Upload lagu baru", "Perfect - Ed Sheeran", "2 jam lalu"),
        styled_activity("user", "User baru terdaftar", "John Doe", "3 jam lalu"),
        styled_activity("tournament", "Tournament dimulai", "Weekly Challenge #5", "5 jam lalu"),
        styled_activity("payment", "Pembayaran diterima", "Rp 15.000 - Premium Plan", "1 hari lalu"),
    ]


def load_stats(client: SupabaseClient) -> DashboardStats:
    """Count songs and leaderboard entries; a backend failure leaves the stats at zero."""
    try:
        songs = SongService(client).get_all_songs()
        performances = PerformanceService(client).get_leaderboard(LEADERBOARD_SAMPLE)
    except SupabaseError as e:
        logger.error(f"[dashboard] Failed to load dashboard data: {e}")
        return DashboardStats()

    return DashboardStats(
        total_songs=len(songs),
        total_users=MOCK_TOTAL_USERS,
        total_performances=len(performances),
        revenue=MOCK_REVENUE_IDR,
        revenue_display=f"Rp {format_rupiah(MOCK_REVENUE_IDR)}",
    )


def build_dashboard(client: SupabaseClient) -> DashboardResponse:
    return DashboardResponse(
        title="🛡️ Admin Dashboard",
        subtitle="Nabila Portal Karaoke - Panel Kontrol",
        tabs=TABS,
        stats=load_stats(client),
        recent_activity=recent_activity(),
    )
