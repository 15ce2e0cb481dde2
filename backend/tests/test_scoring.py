from __future__ import annotations
from dataclasses import replace
from moveathon.services.scoring import (
    build_leaderboard, build_team_performance, build_user_stats, eligible_activities, score_activities,
)
from conftest import ist


def test_scenario_from_raw_rows(roster, config, now):
    rows = [
        {"id": "office", "user_id": "u1", "type": "Run", "distance": 10000, "moving_time": 3600,
         "start_date": "2025-10-17T04:30:00Z"},   # 10:00 IST Friday
        {"id": "evening", "user_id": "u1", "type": "Run", "distance": 10000, "moving_time": 3600,
         "start_date": "2025-10-17T11:30:00Z"},   # 17:00 IST Friday
    ]
    board = build_leaderboard(rows, roster, config, now)

    assert [r.user_id for r in board.runners] == ["u1"]
    assert board.runners[0].run == 10.0
    assert board.runners[0].points == 150
    assert board.teams[0].team == "Alpha" and board.teams[0].points == 150


def test_score_activities_keeps_order_and_classifies(week, config, now):
    scored = score_activities(week, config, now)

    assert [s.activity.id for s in scored] == [a.id for a in week]
    slow = next(s for s in scored if s.activity.id == "a-slow-run")
    assert slow.activity.derived_type == "Reclassified-Walk"
    assert [a.id for a in eligible_activities(scored)] == ["a-run", "a-slow-run", "a-walk", "b-walk", "c-ride"]


def test_leaderboard(week, roster, config, now):
    board = build_leaderboard(week, roster, config, now, gender="F")

    assert [(r.user_id, r.run) for r in board.runners] == [("u1", 10.0)]
    assert [(r.user_id, r.walk) for r in board.walkers] == [("u1", 8.0), ("u2", 1.0)]
    assert [(r.user_id, r.cycle) for r in board.cyclers] == [("u3", 30.0)]
    assert [(t.team, t.points) for t in board.teams] == [("Alpha", 262 + 14)]
    assert [r.user_id for r in board.top_by_gender] == ["u3", "u2"]


def test_leaderboard_without_gender(week, roster, config, now):
    board = build_leaderboard(week, roster, config, now)
    assert board.top_by_gender is None
    assert "topByGender" in board.model_dump(by_alias=True)


def test_rounding(make_activity, roster, config, now):
    acts = [make_activity("u1", "Ride", km=12.345, seconds=1800, start=ist(2025, 10, 18, 9, 0))]
    runner = build_leaderboard(acts, roster, config, now).cyclers[0]
    assert runner.cycle == 12.3
    assert runner.points == 74  # 12.345 * 6 = 74.07


def test_idempotent(week, roster, config, now):
    assert build_leaderboard(week, roster, config, now) == build_leaderboard(week, roster, config, now)
    assert build_user_stats(week, roster, config, now, "u1") == build_user_stats(week, roster, config, now, "u1")


def test_monotonic_in_eligible_runs(week, roster, config, now, make_activity):
    before = build_leaderboard(week, roster, config, now)
    extra = make_activity("u2", "Run", km=3, seconds=900, start=ist(2025, 10, 25, 7, 0))
    after = build_leaderboard(week + [extra], roster, config, now)

    assert [(r.user_id, r.run) for r in after.runners] == [("u1", 10.0), ("u2", 3.0)]
    assert [(r.user_id, r.walk) for r in after.walkers] == [(r.user_id, r.walk) for r in before.walkers]
    assert [(r.user_id, r.cycle) for r in after.cyclers] == [(r.user_id, r.cycle) for r in before.cyclers]
    assert after.teams[0].points == before.teams[0].points + 45

    # nobody else's totals move when u2 gains a run
    def totals(board):
        rows = board.runners + board.walkers + board.cyclers
        return {r.user_id: r.points for r in rows}
    gained, kept = totals(after), totals(before)
    assert gained["u2"] == kept["u2"] + 45
    assert all(gained[uid] >= pts for uid, pts in kept.items())
    assert {uid: pts for uid, pts in gained.items() if uid != "u2"} == {
        uid: pts for uid, pts in kept.items() if uid != "u2"
    }


def test_lock_precedence(week, roster, config, now):
    locked = [
        replace(a, is_valid=False, is_valid_locked=True) if a.id == "a-run" else a
        for a in week
    ]
    board = build_leaderboard(locked, roster, config, now)
    assert board.runners == []


def test_user_stats(week, roster, config, now):
    stats = build_user_stats(week, roster, config, now, "u1")

    assert stats.total_activities == 3
    assert stats.run_km == 10.0 and stats.walk_km == 8.0 and stats.cycle_km == 0.0
    assert stats.total_km == 18.0
    assert stats.active_days == 3
    assert stats.longest_walk == 5.0      # the reclassified run
    assert stats.longest_run == 10.0
    assert stats.longest_cycle is None    # the only ride was during office hours
    assert stats.total_points == 262
    assert stats.overall_rank == 1 and stats.team_rank == 1
    assert stats.total_participants == 3
    # raw statistics still count the slow run as a run
    assert stats.distance_by_type == {"Run": 15.0, "Walk": 3.0}


def test_user_stats_ranks(week, roster, config, now):
    u2 = build_user_stats(week, roster, config, now, "u2")
    u3 = build_user_stats(week, roster, config, now, "u3")

    assert (u2.overall_rank, u2.team_rank) == (3, 2)
    assert (u3.overall_rank, u3.team_rank) == (2, None)


def test_user_stats_payload_keys(week, roster, config, now):
    payload = build_user_stats(week, roster, config, now, "u1").model_dump(by_alias=True)
    assert set(payload) == {
        "totalActivities", "totalKm", "walkKm", "runKm", "cycleKm", "activeDays",
        "longestWalk", "longestRun", "longestCycle", "totalPoints", "teamRank",
        "overallRank", "totalParticipants", "distanceByType",
    }


def test_user_stats_unknown_user(week, roster, config, now):
    stats = build_user_stats(week, roster, config, now, "nobody")
    assert stats.total_points == 0 and stats.overall_rank is None
    assert stats.total_participants == 3


def test_team_performance(week, roster, config, now):
    teams = build_team_performance(week, roster, config, now)

    assert len(teams) == 1
    alpha = teams[0]
    assert alpha.team_name == "Alpha" and alpha.total_points == 276
    assert [(m.user_id, m.points) for m in alpha.members] == [("u1", 262), ("u2", 14)]
