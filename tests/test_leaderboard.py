import pytest

from app.core.exceptions import SnapshotNotFoundError
from app.db.models.category import Category
from app.db.models.placement import SeasonPlacement
from app.db.models.season import Season
from app.schemas.scoring import Medals, SeasonPlacementOut
from app.services import leaderboard
from app.services.scoring import score_race, score_season_start

RESULT_RACE_1 = ["VER", "NOR", "LEC", "PIA", "HAM", "RUS", "SAI", "GAS", "OCO", "ALB"]


@pytest.fixture
def scored_season(db, season, races, scoring_tables, two_guessers, add_place_guess, add_result):
    alice, bob = two_guessers
    race = races[0]

    score_season_start(db, season.id)

    add_result(race, RESULT_RACE_1)
    add_place_guess(alice, race, Category.FIRST, "VER")
    score_race(db, race.id)
    return season, race, alice, bob


def test_leaderboard_uses_season_start_before_any_race(db, season, scoring_tables, two_guessers):
    alice, bob = two_guessers
    score_season_start(db, season.id)

    rows = leaderboard.season_leaderboard(db, season.id)
    assert [(r.username, r.position, r.points) for r in rows] == [("alice", 1, 90), ("bob", 2, 75)]


def test_leaderboard_uses_latest_scored_race(db, scored_season):
    season, race, alice, bob = scored_season

    assert leaderboard.latest_scored_race(db, season.id).id == race.id
    rows = leaderboard.season_leaderboard(db, season.id)
    # alice 90 + 25 del ganador; bob sigue en 75
    assert [(r.username, r.points) for r in rows] == [("alice", 115), ("bob", 75)]


def test_leaderboard_empty_when_nothing_scored(db, season):
    assert leaderboard.season_leaderboard(db, season.id) == []


def test_points_series_starts_at_season_start(db, scored_season):
    season, race, alice, bob = scored_season

    series = leaderboard.points_series(db, season.id)

    assert [(p.race_position, p.points) for p in series["alice"]] == [(0, 90), (1, 115)]
    assert series["alice"][1].race_name == race.name
    assert [p.position for p in series["bob"]] == [2, 2]


def test_finalize_season_assigns_placements(db, scored_season):
    season, _, alice, bob = scored_season

    assert leaderboard.finalize_season(db, season.id) == 2
    # Repetir no duplica filas
    assert leaderboard.finalize_season(db, season.id) == 2

    rows = db.query(SeasonPlacement).filter(SeasonPlacement.season_id == season.id).all()
    assert {(r.user_id, r.placement) for r in rows} == {(alice.id, 1), (bob.id, 2)}
    assert db.get(Season, season.id).is_finished is True

    assert leaderboard.medals(db, alice.id) == Medals(gold=1)
    assert leaderboard.medals(db, bob.id) == Medals(silver=1)


def test_finalize_without_scores(db, season):
    with pytest.raises(SnapshotNotFoundError):
        leaderboard.finalize_season(db, season.id)
    assert db.get(Season, season.id).is_finished is False


def test_finalize_with_only_season_start(db, season, scoring_tables, two_guessers):
    alice, _ = two_guessers
    score_season_start(db, season.id)

    assert leaderboard.finalize_season(db, season.id) == 2
    assert leaderboard.medals(db, alice.id) == Medals(gold=1)


def test_medals_and_previous_placements_across_seasons(db, make_user):
    user = make_user("alice")
    for year, placement in [(2022, 3), (2023, 1), (2024, 5), (2025, 1)]:
        season = Season(year=year, name=str(year), is_finished=True)
        db.add(season)
        db.flush()
        db.add(SeasonPlacement(season_id=season.id, user_id=user.id, placement=placement, points=100))
    db.commit()

    assert leaderboard.medals(db, user.id) == Medals(gold=2, silver=0, bronze=1)
    assert leaderboard.previous_placements(db, user.id) == [
        SeasonPlacementOut(year=2025, placement=1),
        SeasonPlacementOut(year=2024, placement=5),
        SeasonPlacementOut(year=2023, placement=1),
        SeasonPlacementOut(year=2022, placement=3),
    ]
