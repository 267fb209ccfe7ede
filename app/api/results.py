from fastapi import APIRouter, HTTPException, Depends
from sqlalchemy.orm import Session
from app.db.models.race_result import RaceResult
from app.db.models.starting_grid import StartingGrid
from app.db.models.standings import DriverStanding, ConstructorStanding
from app.schemas.season import RacePositionIn, StandingIn, FlagStatIn
from app.core.deps import get_db, get_current_user, require_admin, http_error
from app.core.exceptions import F1GuessError
from app.services import results_sync

router = APIRouter(prefix="/results", tags=["Race Results"])


@router.put("/{race_id}")
def upsert_race_result(
    race_id: int,
    positions: list[RacePositionIn],
    db: Session = Depends(get_db),
    current_user = Depends(require_admin)
):
    try:
        results_sync.save_race_result(db, race_id, [p.model_dump() for p in positions])
    except F1GuessError as e:
        raise http_error(e)
    return {"message": "Resultado guardado"}


@router.get("/{race_id}")
def get_race_result(
    race_id: int,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_user) # Requiere login, pero no ser admin
):
    result = db.query(RaceResult).filter(RaceResult.race_id == race_id).first()
    if not result:
        raise HTTPException(status_code=404, detail="Resultados no disponibles aún")

    return {
        "race_id": result.race_id,
        "positions": [
            {
                "finishing_position": p.finishing_position,
                "classified": p.classified,
                "driver_code": p.driver_code,
                "points": p.points,
            }
            for p in result.positions
        ],
    }


# --- PARRILLA ---
@router.put("/{race_id}/grid")
def upsert_grid(
    race_id: int,
    driver_codes: list[str],
    db: Session = Depends(get_db),
    current_user = Depends(require_admin)
):
    try:
        results_sync.save_starting_grid(db, race_id, driver_codes)
    except F1GuessError as e:
        raise http_error(e)
    return {"message": "Parrilla guardada"}


@router.get("/{race_id}/grid")
def get_grid(race_id: int, db: Session = Depends(get_db), current_user = Depends(get_current_user)):
    rows = (
        db.query(StartingGrid)
        .filter(StartingGrid.race_id == race_id)
        .order_by(StartingGrid.position)
        .all()
    )
    return [r.driver_code for r in rows]


# --- MUNDIAL TRAS LA CARRERA ---
@router.put("/{race_id}/standings/drivers")
def upsert_driver_standings(
    race_id: int,
    standings: list[StandingIn],
    db: Session = Depends(get_db),
    current_user = Depends(require_admin)
):
    try:
        results_sync.save_driver_standings(db, race_id, [(s.name, s.points) for s in standings])
    except F1GuessError as e:
        raise http_error(e)
    return {"message": "Mundial de pilotos guardado"}


@router.put("/{race_id}/standings/constructors")
def upsert_constructor_standings(
    race_id: int,
    standings: list[StandingIn],
    db: Session = Depends(get_db),
    current_user = Depends(require_admin)
):
    try:
        results_sync.save_constructor_standings(db, race_id, [(s.name, s.points) for s in standings])
    except F1GuessError as e:
        raise http_error(e)
    return {"message": "Mundial de constructores guardado"}


@router.get("/{race_id}/standings")
def get_standings(race_id: int, db: Session = Depends(get_db), current_user = Depends(get_current_user)):
    drivers = (
        db.query(DriverStanding)
        .filter(DriverStanding.race_id == race_id)
        .order_by(DriverStanding.position)
        .all()
    )
    constructors = (
        db.query(ConstructorStanding)
        .filter(ConstructorStanding.race_id == race_id)
        .order_by(ConstructorStanding.position)
        .all()
    )
    return {
        "drivers": [{"position": d.position, "name": d.driver_code, "points": d.points} for d in drivers],
        "constructors": [
            {"position": c.position, "name": c.constructor_name, "points": c.points} for c in constructors
        ],
    }


# --- BANDERAS ---
@router.put("/{race_id}/flags")
def upsert_flags(
    race_id: int,
    flags: list[FlagStatIn],
    db: Session = Depends(get_db),
    current_user = Depends(require_admin)
):
    try:
        results_sync.save_flags(db, race_id, [f.model_dump() for f in flags])
    except F1GuessError as e:
        raise http_error(e)
    return {"message": "Banderas guardadas"}


@router.get("/{race_id}/flags")
def get_flags(race_id: int, db: Session = Depends(get_db), current_user = Depends(get_current_user)):
    return [
        {"flag": f.flag, "round": f.round, "session_type": f.session_type}
        for f in results_sync.get_flags(db, race_id)
    ]
