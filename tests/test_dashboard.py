from karaoke.backend.services.dashboard import (
    MOCK_REVENUE_IDR,
    MOCK_TOTAL_USERS,
    TABS,
    build_dashboard,
    load_stats,
    recent_activity,
    styled_activity,
)


def test_stats_count_songs_and_leaderboard(fake_supabase, supabase):
    fake_supabase.tables["songs"] = [{"id": str(i), "uploaded_at": f"2026-01-0{i}"} for i in range(1, 4)]
    fake_supabase.tables["performances"] = [{"id": str(i), "score": i} for i in range(120)]

    stats = load_stats(supabase)

    assert stats.total_songs == 3
    assert stats.total_performances == 100
    assert stats.total_users == MOCK_TOTAL_USERS
    assert stats.revenue == MOCK_REVENUE_IDR
    assert stats.revenue_display == "Rp 2.500.000"
    assert fake_supabase.requests[-1].url.params["limit"] == "100"


def test_stats_stay_zero_when_backend_fails(fake_supabase, supabase):
    fake_supabase.fail["/rest/"] = 500

    stats = load_stats(supabase)

    assert stats.total_songs == 0
    assert stats.total_performances == 0
    assert stats.revenue == 0


def test_activity_styles_by_type():
    assert [a.type for a in recent_activity()] == ["song", "user", "tournament", "payment"]
    assert styled_activity("payment", "a", "b", "c").icon == "fas fa-credit-card"
    unknown = styled_activity("refund", "a", "b", "c")
    assert (unknown.icon, unknown.color) == ("fas fa-info-circle", "#9e9e9e")


def test_dashboard_has_all_tabs(supabase):
    dashboard = build_dashboard(supabase)

    assert [t.id for t in dashboard.tabs] == [t.id for t in TABS]
    assert [t.id for t in TABS] == ["overview", "songs", "tournaments", "payments", "users"]
    assert len(dashboard.recent_activity) == 4
