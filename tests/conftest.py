"""
Fixtures comunes: BD SQLite en memoria, reloj fijo para el CutoffGate y
fábricas para temporada, jugadores, apuestas y resultados.
"""
import os

# Antes de importar la app: que main.py no cree un fichero .db al importarse
os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from datetime import datetime, timezone
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.deps import get_db, get_gate
from app.core.security import create_access_token
from app.db.session import Base
from app.db.models import _all
from app.db.models.category import Category, Flag
from app.db.models.constructor import Constructor
from app.db.models.driver import Driver
from app.db.models.guess import ConstructorGuess, DriverGuess, FlagGuess, PlaceGuess
from app.db.models.race import Race
from app.db.models.scoring_entry import ScoringEntry
from app.db.models.season import Season
from app.db.models.user import User
from app.services import results_sync
from app.services.cutoff import CutoffGate

NOW = datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)

DRIVERS = ["VER", "NOR", "LEC"]
CONSTRUCTORS = ["Red Bull", "McLaren", "Ferrari"]

# 10 clasificados: VER gana, ALB es décimo
RESULT_RACE_1 = ["VER", "NOR", "LEC", "PIA", "HAM", "RUS", "SAI", "GAS", "OCO", "ALB"]


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db(engine):
    session = sessionmaker(bind=engine, autocommit=False, autoflush=False)()
    yield session
    session.close()


@pytest.fixture
def clock():
    return lambda: NOW


@pytest.fixture
def gate(db, clock):
    return CutoffGate(db, clock=clock)


@pytest.fixture
def client(db, clock):
    from main import app

    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_gate] = lambda: CutoffGate(db, clock=clock)
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


def auth(user: User) -> dict:
    return {"Authorization": f"Bearer {create_access_token(user.id)}"}


@pytest.fixture
def auth_headers():
    return auth


# ------------------------------------------------------------------------------
# Fábricas
# ------------------------------------------------------------------------------

@pytest.fixture
def make_user(db):
    def _make(username: str, role: str = "user") -> User:
        user = User(username=username, role=role)
        db.add(user)
        db.commit()
        db.refresh(user)
        return user
    return _make


@pytest.fixture
def season(db):
    season = Season(year=2025, name="Temporada 2025", is_active=True)
    db.add(season)
    db.flush()

    for position, name in enumerate(CONSTRUCTORS, start=1):
        db.add(Constructor(season_id=season.id, name=name, position=position))
    for position, code in enumerate(DRIVERS, start=1):
        db.add(Driver(season_id=season.id, code=code, name=code, position=position))

    db.commit()
    db.refresh(season)
    return season


@pytest.fixture
def races(db, season):
    created = []
    for position, name in [(1, "Bahrain Grand Prix"), (2, "Saudi Arabian Grand Prix")]:
        race = Race(season_id=season.id, position=position, name=name)
        db.add(race)
        created.append(race)
    db.commit()
    for race in created:
        db.refresh(race)
    return created


@pytest.fixture
def scoring_tables(db, season):
    tables = {
        Category.DRIVER: {0: 10, 1: 5},
        Category.CONSTRUCTOR: {0: 10, 1: 5},
        Category.FLAG: {0: 10, 1: 5},
        Category.FIRST: {0: 25},
        Category.TENTH: {0: 10},
    }
    for category, table in tables.items():
        for diff, points in table.items():
            db.add(ScoringEntry(season_id=season.id, category=category, diff=diff, points=points))
    db.commit()
    return tables


@pytest.fixture
def add_season_guesses(db, season):
    """Inserta apuestas de temporada directamente, sin pasar por el gate."""
    def _add(user, drivers=None, constructors=None, flags=None):
        for position, code in enumerate(drivers or [], start=1):
            db.add(DriverGuess(
                user_id=user.id, season_id=season.id, position=position, driver_code=code, submitted_at=NOW
            ))
        for position, name in enumerate(constructors or [], start=1):
            db.add(ConstructorGuess(
                user_id=user.id, season_id=season.id, position=position, constructor_name=name, submitted_at=NOW
            ))
        for flag, amount in (flags or {}).items():
            db.add(FlagGuess(
                user_id=user.id, season_id=season.id, flag=flag, amount=amount, submitted_at=NOW
            ))
        db.commit()
    return _add


@pytest.fixture
def add_place_guess(db):
    def _add(user, race, category, driver_code):
        db.add(PlaceGuess(
            user_id=user.id, race_id=race.id, category=category, driver_code=driver_code, submitted_at=NOW
        ))
        db.commit()
    return _add


@pytest.fixture
def add_result(db):
    def _add(race, codes):
        results_sync.save_race_result(db, race.id, [
            {"finishing_position": i, "driver_code": code}
            for i, code in enumerate(codes, start=1)
        ])
    return _add


@pytest.fixture
def two_guessers(make_user, add_season_guesses):
    """
    alice: acierta el orden de inscripción y no apuesta banderas (0 de todo).
    bob:   cambia VER y NOR, y apuesta 1 bandera amarilla.
    """
    alice = make_user("alice")
    bob = make_user("bob")

    add_season_guesses(
        alice,
        drivers=["VER", "NOR", "LEC"],
        constructors=CONSTRUCTORS,
        flags={Flag.YELLOW_FLAG: 0, Flag.RED_FLAG: 0, Flag.SAFETY_CAR: 0},
    )
    add_season_guesses(
        bob,
        drivers=["NOR", "VER", "LEC"],
        constructors=CONSTRUCTORS,
        flags={Flag.YELLOW_FLAG: 1, Flag.RED_FLAG: 0, Flag.SAFETY_CAR: 0},
    )
    return alice, bob
