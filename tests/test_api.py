from datetime import timedelta

from app.db.models.category import Category
from app.db.models.driver import Driver

RESULT_RACE_1 = ["VER", "NOR", "LEC", "PIA", "HAM", "RUS", "SAI", "GAS", "OCO", "ALB"]


def test_requires_token(client, season):
    assert client.get(f"/stats/seasons/{season.id}/leaderboard").status_code == 401


def test_admin_routes_reject_players(client, make_user, auth_headers):
    user = make_user("alice")
    response = client.post("/admin/seasons", json={"year": 2030, "name": "2030"}, headers=auth_headers(user))
    assert response.status_code == 403


def test_create_season_seeds_default_cutoff(client, make_user, auth_headers):
    admin = make_user("admin", role="admin")

    response = client.post("/admin/seasons", json={"year": 2030, "name": "2030"}, headers=auth_headers(admin))
    assert response.status_code == 200
    season_id = response.json()["id"]

    cutoff = client.get(f"/guesses/seasons/{season_id}/cutoff", headers=auth_headers(admin))
    assert cutoff.status_code == 200
    assert cutoff.json()["is_open"] is True


def test_guess_without_cutoff_is_conflict(client, season, make_user, auth_headers):
    user = make_user("alice")
    response = client.put(
        f"/guesses/seasons/{season.id}/drivers",
        json={"ranking": ["VER", "NOR", "LEC"]},
        headers=auth_headers(user),
    )
    assert response.status_code == 409


def test_guess_after_cutoff_is_forbidden(client, db, gate, season, make_user, auth_headers):
    user = make_user("alice")
    gate.set_season_cutoff(season.id, gate.clock() - timedelta(minutes=1))

    response = client.put(
        f"/guesses/seasons/{season.id}/flags",
        json={"amounts": {"YELLOW_FLAG": 1, "RED_FLAG": 0, "SAFETY_CAR": 2}},
        headers=auth_headers(user),
    )
    assert response.status_code == 403


def test_invalid_ranking_is_bad_request(client, gate, season, make_user, auth_headers):
    user = make_user("alice")
    gate.set_season_cutoff(season.id, gate.clock() + timedelta(days=1))

    response = client.put(
        f"/guesses/seasons/{season.id}/drivers",
        json={"ranking": ["VER", "VER", "LEC"]},
        headers=auth_headers(user),
    )
    assert response.status_code == 400


def test_scoring_table_crud(client, season, make_user, auth_headers):
    headers = auth_headers(make_user("admin", role="admin"))
    url = f"/admin/seasons/{season.id}/scoring-table"

    assert client.post(url, json={"category": "DRIVER", "diff": 0}, headers=headers).status_code == 200
    assert client.post(url, json={"category": "DRIVER", "diff": 0}, headers=headers).status_code == 409
    assert client.post(url, json={"category": "DRIVER", "diff": -2}, headers=headers).status_code == 400

    assert client.patch(url, json={"category": "DRIVER", "diff": 0, "points": 15}, headers=headers).status_code == 200
    assert client.patch(url, json={"category": "DRIVER", "diff": 7, "points": 1}, headers=headers).status_code == 404
    assert client.get(url, headers=headers).json()["DRIVER"] == {"0": 15}

    assert client.delete(url, params={"category": "DRIVER", "diff": 0}, headers=headers).status_code == 200
    assert client.get(url, headers=headers).json()["DRIVER"] == {}


def test_repeated_competitors_are_bad_request(client, db, races, make_user, auth_headers):
    headers = auth_headers(make_user("admin", role="admin"))
    race = races[0]
    season_id = race.season_id

    drivers = [{"code": "ver", "name": "Max Verstappen"}, {"code": "VER", "name": "Max"}]
    response = client.put(f"/admin/seasons/{season_id}/drivers", json=drivers, headers=headers)
    assert response.status_code == 400

    constructors = [{"name": "McLaren"}, {"name": "McLaren"}]
    response = client.put(f"/admin/seasons/{season_id}/constructors", json=constructors, headers=headers)
    assert response.status_code == 400

    standings = [{"name": "NOR", "points": 25}, {"name": "NOR", "points": 18}]
    response = client.put(f"/results/{race.id}/standings/drivers", json=standings, headers=headers)
    assert response.status_code == 400

    # La lista anterior sigue intacta
    assert db.query(Driver).filter(Driver.season_id == season_id).count() == 3


def test_full_round(client, db, races, scoring_tables, make_user, auth_headers):
    admin = auth_headers(make_user("admin", role="admin"))
    alice = make_user("alice")
    race = races[0]
    season_id = race.season_id

    # Plazos abiertos respecto al reloj fijo de los tests
    client.put(f"/admin/seasons/{season_id}/cutoff", json={"cutoff": "2025-03-02T12:00:00+00:00"}, headers=admin)
    client.put(f"/admin/races/{race.id}/cutoff", json={"cutoff": "2025-03-02T12:00:00+00:00"}, headers=admin)
    client.put(f"/results/{race.id}/grid", json=RESULT_RACE_1, headers=admin)

    me = auth_headers(alice)
    assert client.put(
        f"/guesses/seasons/{season_id}/drivers", json={"ranking": ["VER", "NOR", "LEC"]}, headers=me
    ).status_code == 200
    assert client.put(
        f"/guesses/seasons/{season_id}/constructors",
        json={"ranking": ["Red Bull", "McLaren", "Ferrari"]},
        headers=me,
    ).status_code == 200
    assert client.put(
        f"/guesses/seasons/{season_id}/flags",
        json={"amounts": {"YELLOW_FLAG": 0, "RED_FLAG": 0, "SAFETY_CAR": 0}},
        headers=me,
    ).status_code == 200
    assert client.get(f"/guesses/seasons/{season_id}/current-race", headers=me).json()["id"] == race.id
    assert client.put(
        f"/guesses/races/{race.id}", json={"category": "FIRST", "driver_code": "VER"}, headers=me
    ).status_code == 200

    # Sin resultado todavía: no se puede puntuar la carrera
    assert client.post(f"/admin/races/{race.id}/score", headers=admin).status_code == 404

    rows = [{"finishing_position": i, "driver_code": c} for i, c in enumerate(RESULT_RACE_1, start=1)]
    assert client.put(f"/results/{race.id}", json=rows, headers=admin).status_code == 200

    runs = client.post(f"/admin/seasons/{season_id}/rescore", headers=admin)
    assert runs.status_code == 200
    assert len(runs.json()) == 2

    summary = client.get(f"/stats/races/{race.id}/summaries/{alice.id}", headers=me).json()
    assert summary["total"] == {"position": 1, "points": 115}
    assert summary["categories"][Category.FIRST.value] == {"position": 1, "points": 25}

    board = client.get(f"/stats/seasons/{season_id}/leaderboard", headers=me).json()
    assert [(r["username"], r["points"]) for r in board] == [("alice", 115)]

    series = client.get(f"/stats/seasons/{season_id}/series", headers=me).json()
    assert [p["points"] for p in series["alice"]] == [90, 115]

    assert client.post(f"/admin/seasons/{season_id}/finalize", headers=admin).status_code == 200
    assert client.get(f"/stats/users/{alice.id}/medals", headers=me).json() == {"gold": 1, "silver": 0, "bronze": 0}


def test_missing_summary_is_not_found(client, races, make_user, auth_headers):
    user = make_user("alice")
    response = client.get(f"/stats/races/{races[0].id}/summaries/{user.id}", headers=auth_headers(user))
    assert response.status_code == 404
    # La lista vacía no es un error
    assert client.get(f"/stats/races/{races[0].id}/summaries", headers=auth_headers(user)).json() == []
