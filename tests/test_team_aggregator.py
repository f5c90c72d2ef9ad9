from studyjam.calculation.stats import compute_stats
from studyjam.calculation.team_aggregator import aggregate_teams
from studyjam.models.participant import NO_TEAM

from conftest import make_participant


def test_groups_exclude_unassigned_and_compute_sums():
    people = [
        make_participant("a@x.com", 0, badges=19, arcade=1, team="TeamX"),
        make_participant("b@x.com", 1, badges=5, arcade=0, team="TeamX"),
        make_participant("c@x.com", 2, badges=20, arcade=0, team="TeamY"),
        make_participant("d@x.com", 3, badges=20, arcade=0, team=NO_TEAM),
    ]
    standings = aggregate_teams(people)

    assert [t.team_name for t in standings] == ["TeamY", "TeamX"]
    team_y, team_x = standings
    assert team_y.rank == 1 and team_x.rank == 2

    assert team_x.member_count == 2
    assert team_x.total_progress == 125
    assert team_x.total_badges == 24
    assert team_x.total_arcade == 1
    assert team_x.completed_count == 1
    # 62.5 rounds half up
    assert team_x.average_progress == 63


def test_ties_break_on_badges_then_name():
    people = [
        make_participant("a@x.com", 0, badges=0, arcade=10, team="bravo"),
        make_participant("b@x.com", 1, badges=10, arcade=0, team="Charlie"),
        make_participant("c@x.com", 2, badges=0, arcade=10, team="Alpha"),
    ]
    standings = aggregate_teams(people)
    assert [t.team_name for t in standings] == ["Charlie", "Alpha", "bravo"]
    assert [t.rank for t in standings] == [1, 2, 3]


def test_averages_are_never_negative():
    people = [make_participant(f"u{i}@x.com", i, badges=i, team=f"T{i % 3}") for i in range(9)]
    for team in aggregate_teams(people):
        assert 0 <= team.average_progress <= 100


def test_no_teams_when_nobody_matched():
    assert aggregate_teams([make_participant("a@x.com", 0, badges=3)]) == []


def test_quick_stats():
    people = [
        make_participant("a@x.com", 0, badges=19, arcade=1),
        make_participant("b@x.com", 1, badges=10, arcade=0),
        make_participant("c@x.com", 2, badges=1, arcade=0),
    ]
    stats = compute_stats(people)
    assert stats.total_participants == 3
    assert stats.above_half == 2
    assert stats.total_badges == 30
    assert stats.completed == 1
    # (100 + 50 + 5) / 3 = 51.67
    assert stats.average_progress == 52


def test_quick_stats_empty():
    stats = compute_stats([])
    assert stats.total_participants == 0
    assert stats.average_progress == 0
