from fastapi import APIRouter, HTTPException, Depends
from sqlalchemy.orm import Session
from app.db.models.season import Season
from app.db.models.race import Race
from app.db.models.driver import Driver
from app.db.models.constructor import Constructor
from app.db.models.category import Category
from app.schemas.season import SeasonCreate, SeasonOut, RaceCreate, RaceOut, DriverIn, ConstructorIn
from app.schemas.scoring import CutoffIn, ScoringEntryIn, ScoringPointsIn
from app.core.deps import get_db, get_gate, require_admin, http_error
from app.core.exceptions import F1GuessError
from app.services import scoring_table
from app.services.cutoff import CutoffGate
from app.services.scoring import score_race, score_season_start, rescore_season
from app.services.leaderboard import finalize_season
from app.services.results_sync import sync_race_data, sync_starting_grid

router = APIRouter(prefix="/admin", tags=["Admin"])


# -----------------------
# Temporadas
# -----------------------
@router.get("/seasons", response_model=list[SeasonOut])
def list_seasons(db: Session = Depends(get_db), current_user = Depends(require_admin)):
    return db.query(Season).order_by(Season.year.desc()).all()


@router.post("/seasons", response_model=SeasonOut)
def create_season(
    season_in: SeasonCreate,
    copy_scoring_from: int | None = None,
    db: Session = Depends(get_db),
    gate: CutoffGate = Depends(get_gate),
    current_user = Depends(require_admin)
):
    if db.query(Season).filter(Season.year == season_in.year).first():
        raise HTTPException(400, "Ya existe una temporada para ese año")

    season = Season(**season_in.model_dump())
    db.add(season)
    db.commit()
    db.refresh(season)

    # Cutoff por defecto: 1 de enero a medianoche, hora local
    gate.init_season_cutoff(season.id)

    if copy_scoring_from is not None:
        scoring_table.copy_table(db, copy_scoring_from, season.id)

    return season


@router.put("/seasons/{season_id}/drivers")
def set_drivers(
    season_id: int,
    drivers: list[DriverIn],
    db: Session = Depends(get_db),
    current_user = Depends(require_admin)
):
    """La lista llega en orden de inscripción (es la clasificación antes de la primera carrera)."""
    if not db.get(Season, season_id):
        raise HTTPException(404, "Temporada no encontrada")

    codes = [d.code.upper() for d in drivers]
    if len(set(codes)) != len(codes):
        raise HTTPException(400, "Hay pilotos repetidos en la lista")

    constructors = {
        c.name: c.id
        for c in db.query(Constructor).filter(Constructor.season_id == season_id).all()
    }

    db.query(Driver).filter(Driver.season_id == season_id).delete()
    for position, d in enumerate(drivers, start=1):
        db.add(Driver(
            season_id=season_id,
            code=d.code.upper(),
            name=d.name,
            position=position,
            constructor_id=constructors.get(d.constructor)
        ))
    db.commit()
    return {"message": f"{len(drivers)} pilotos guardados"}


@router.put("/seasons/{season_id}/constructors")
def set_constructors(
    season_id: int,
    constructors: list[ConstructorIn],
    db: Session = Depends(get_db),
    current_user = Depends(require_admin)
):
    if not db.get(Season, season_id):
        raise HTTPException(404, "Temporada no encontrada")

    keep = {c.name for c in constructors}
    if len(keep) != len(constructors):
        raise HTTPException(400, "Hay escuderías repetidas en la lista")

    existing = {c.name: c for c in db.query(Constructor).filter(Constructor.season_id == season_id).all()}
    for name, row in existing.items():
        if name not in keep:
            db.delete(row)

    for position, c in enumerate(constructors, start=1):
        row = existing.get(c.name)
        if not row:
            row = Constructor(season_id=season_id, name=c.name)
            db.add(row)
        row.color = c.color
        row.position = position
    db.commit()
    return {"message": f"{len(constructors)} escuderías guardadas"}


# -----------------------
# Carreras
# -----------------------
@router.post("/races", response_model=RaceOut)
def create_race(race_in: RaceCreate, db: Session = Depends(get_db), current_user = Depends(require_admin)):
    if not db.get(Season, race_in.season_id):
        raise HTTPException(404, "Temporada no encontrada")

    clash = db.query(Race).filter(
        Race.season_id == race_in.season_id,
        Race.position == race_in.position
    ).first()
    if clash:
        raise HTTPException(400, "Ya hay una carrera en esa posición")

    race = Race(**race_in.model_dump())
    db.add(race)
    db.commit()
    db.refresh(race)
    return race


# -----------------------
# Cutoffs
# -----------------------
@router.put("/seasons/{season_id}/cutoff")
def set_season_cutoff(
    season_id: int,
    body: CutoffIn,
    db: Session = Depends(get_db),
    gate: CutoffGate = Depends(get_gate),
    current_user = Depends(require_admin)
):
    if not db.get(Season, season_id):
        raise HTTPException(404, "Temporada no encontrada")
    return {"cutoff": gate.set_season_cutoff(season_id, body.cutoff)}


@router.put("/races/{race_id}/cutoff")
def set_race_cutoff(
    race_id: int,
    body: CutoffIn,
    db: Session = Depends(get_db),
    gate: CutoffGate = Depends(get_gate),
    current_user = Depends(require_admin)
):
    if not db.get(Race, race_id):
        raise HTTPException(404, "Carrera no encontrada")
    return {"cutoff": gate.set_race_cutoff(race_id, body.cutoff)}


# -----------------------
# Tabla de puntos
# -----------------------
@router.get("/seasons/{season_id}/scoring-table")
def get_scoring_table(season_id: int, db: Session = Depends(get_db), current_user = Depends(require_admin)):
    return {category.value: scoring_table.get_table(db, season_id, category) for category in Category}


@router.post("/seasons/{season_id}/scoring-table")
def add_scoring_entry(
    season_id: int,
    body: ScoringEntryIn,
    db: Session = Depends(get_db),
    current_user = Depends(require_admin)
):
    try:
        entry = scoring_table.add_entry(db, season_id, body.category, body.diff)
    except F1GuessError as e:
        raise http_error(e)
    return {"category": entry.category, "diff": entry.diff, "points": entry.points}


@router.patch("/seasons/{season_id}/scoring-table")
def set_scoring_points(
    season_id: int,
    body: ScoringPointsIn,
    db: Session = Depends(get_db),
    current_user = Depends(require_admin)
):
    if not scoring_table.set_points(db, season_id, body.category, body.diff, body.points):
        raise HTTPException(404, "Ese diff no existe en la tabla")
    return {"message": "Puntos actualizados"}


@router.delete("/seasons/{season_id}/scoring-table")
def remove_scoring_entry(
    season_id: int,
    category: Category,
    diff: int,
    db: Session = Depends(get_db),
    current_user = Depends(require_admin)
):
    if not scoring_table.remove_entry(db, season_id, category, diff):
        raise HTTPException(404, "Ese diff no existe en la tabla")
    return {"message": "Entrada eliminada"}


@router.post("/seasons/{season_id}/scoring-table/copy")
def copy_scoring_table(
    season_id: int,
    from_season_id: int,
    db: Session = Depends(get_db),
    current_user = Depends(require_admin)
):
    return {"copied": scoring_table.copy_table(db, from_season_id, season_id)}


# -----------------------
# Puntuación
# -----------------------
@router.post("/races/{race_id}/score")
def run_race_scoring(race_id: int, db: Session = Depends(get_db), current_user = Depends(require_admin)):
    try:
        return score_race(db, race_id)
    except F1GuessError as e:
        raise http_error(e)


@router.post("/seasons/{season_id}/score-start")
def run_season_start_scoring(season_id: int, db: Session = Depends(get_db), current_user = Depends(require_admin)):
    try:
        return score_season_start(db, season_id)
    except F1GuessError as e:
        raise http_error(e)


@router.post("/seasons/{season_id}/rescore")
def run_rescore(season_id: int, db: Session = Depends(get_db), current_user = Depends(require_admin)):
    try:
        return rescore_season(db, season_id)
    except F1GuessError as e:
        raise http_error(e)


@router.post("/seasons/{season_id}/finalize")
def run_finalize(season_id: int, db: Session = Depends(get_db), current_user = Depends(require_admin)):
    try:
        written = finalize_season(db, season_id)
    except F1GuessError as e:
        raise http_error(e)
    return {"message": "Temporada cerrada", "placements": written}


# -----------------------
# Importación FastF1
# -----------------------
@router.post("/races/{race_id}/sync")
def sync_race(race_id: int, db: Session = Depends(get_db), current_user = Depends(require_admin)):
    try:
        ok, logs = sync_race_data(db, race_id)
    except F1GuessError as e:
        raise http_error(e)
    return {"success": ok, "logs": logs}


@router.post("/races/{race_id}/sync-grid")
def sync_grid(race_id: int, db: Session = Depends(get_db), current_user = Depends(require_admin)):
    try:
        ok, logs = sync_starting_grid(db, race_id)
    except F1GuessError as e:
        raise http_error(e)
    return {"success": ok, "logs": logs}
