import pytest
from datetime import timedelta

from app.core.exceptions import (
    CutoffNotConfiguredError,
    GuessingClosedError,
    InvalidGuessError,
    NotFoundError,
)
from app.db.models.category import Category, Flag
from app.db.models.guess import DriverGuess
from app.services import guesses, results_sync

ALL_ZERO = {Flag.YELLOW_FLAG: 0, Flag.RED_FLAG: 0, Flag.SAFETY_CAR: 0}


@pytest.fixture
def open_season(db, season, gate):
    gate.set_season_cutoff(season.id, gate.clock() + timedelta(days=1))
    return season


def test_driver_ranking_replaces_previous(db, gate, open_season, make_user):
    user = make_user("alice")

    guesses.set_driver_ranking(db, gate, user.id, open_season.id, ["VER", "NOR", "LEC"])
    guesses.set_driver_ranking(db, gate, user.id, open_season.id, ["LEC", "VER", "NOR"])

    assert guesses.get_driver_ranking(db, user.id, open_season.id) == ["LEC", "VER", "NOR"]
    assert db.query(DriverGuess).filter(DriverGuess.user_id == user.id).count() == 3


def test_ranking_must_match_season_competitors(db, gate, open_season, make_user):
    user = make_user("alice")

    with pytest.raises(InvalidGuessError):
        guesses.set_driver_ranking(db, gate, user.id, open_season.id, ["VER", "VER", "LEC"])
    with pytest.raises(InvalidGuessError):
        guesses.set_driver_ranking(db, gate, user.id, open_season.id, ["VER", "NOR"])
    with pytest.raises(InvalidGuessError):
        guesses.set_constructor_ranking(db, gate, user.id, open_season.id, ["Red Bull", "McLaren", "Haas"])


def test_writes_blocked_after_cutoff(db, gate, season, make_user):
    user = make_user("alice")
    gate.set_season_cutoff(season.id, gate.clock())

    with pytest.raises(GuessingClosedError):
        guesses.set_flag_guesses(db, gate, user.id, season.id, ALL_ZERO)
    assert guesses.get_flag_guesses(db, user.id, season.id) == {}


def test_writes_blocked_without_cutoff(db, gate, season, make_user):
    user = make_user("alice")
    with pytest.raises(CutoffNotConfiguredError):
        guesses.set_driver_ranking(db, gate, user.id, season.id, ["VER", "NOR", "LEC"])


def test_flag_guesses_need_every_flag(db, gate, open_season, make_user):
    user = make_user("alice")

    with pytest.raises(InvalidGuessError):
        guesses.set_flag_guesses(db, gate, user.id, open_season.id, {Flag.RED_FLAG: 1})
    with pytest.raises(InvalidGuessError):
        guesses.set_flag_guesses(db, gate, user.id, open_season.id, {**ALL_ZERO, Flag.RED_FLAG: -1})

    guesses.set_flag_guesses(db, gate, user.id, open_season.id, {**ALL_ZERO, Flag.SAFETY_CAR: 4})
    guesses.set_flag_guesses(db, gate, user.id, open_season.id, {**ALL_ZERO, Flag.SAFETY_CAR: 2})
    assert guesses.get_flag_guesses(db, user.id, open_season.id)[Flag.SAFETY_CAR] == 2


def test_season_guessers_need_all_three_categories(db, gate, open_season, make_user):
    alice, bob = make_user("alice"), make_user("bob")

    for user in (alice, bob):
        guesses.set_driver_ranking(db, gate, user.id, open_season.id, ["VER", "NOR", "LEC"])
        guesses.set_constructor_ranking(db, gate, user.id, open_season.id, ["Red Bull", "McLaren", "Ferrari"])
    guesses.set_flag_guesses(db, gate, alice.id, open_season.id, ALL_ZERO)

    assert [u.username for u in guesses.season_guessers(db, open_season.id)] == ["alice"]


def test_place_guess_checks_category_grid_and_cutoff(db, gate, races, make_user):
    user = make_user("alice")
    race = races[0]
    gate.set_race_cutoff(race.id, gate.clock() + timedelta(hours=2))
    results_sync.save_starting_grid(db, race.id, ["VER", "NOR"])

    with pytest.raises(InvalidGuessError):
        guesses.set_place_guess(db, gate, user.id, race.id, Category.DRIVER, "VER")
    with pytest.raises(InvalidGuessError):
        guesses.set_place_guess(db, gate, user.id, race.id, Category.FIRST, "LEC")

    guesses.set_place_guess(db, gate, user.id, race.id, Category.FIRST, "VER")
    guesses.set_place_guess(db, gate, user.id, race.id, Category.FIRST, "NOR")
    guesses.set_place_guess(db, gate, user.id, race.id, Category.TENTH, "VER")

    assert guesses.get_place_guesses(db, user.id, race.id) == {
        Category.FIRST: "NOR",
        Category.TENTH: "VER",
    }

    gate.set_race_cutoff(race.id, gate.clock())
    with pytest.raises(GuessingClosedError):
        guesses.set_place_guess(db, gate, user.id, race.id, Category.FIRST, "VER")


def test_current_race_to_guess(db, races, add_result):
    first, second = races
    season_id = first.season_id

    with pytest.raises(NotFoundError):
        guesses.current_race_to_guess(db, season_id)

    results_sync.save_starting_grid(db, first.id, ["VER"])
    results_sync.save_starting_grid(db, second.id, ["VER"])
    assert guesses.current_race_to_guess(db, season_id).id == first.id

    add_result(first, ["VER"])
    assert guesses.current_race_to_guess(db, season_id).id == second.id
