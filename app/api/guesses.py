from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from app.core.deps import get_db, get_gate, get_current_user, http_error
from app.core.exceptions import F1GuessError
from app.schemas.scoring import CutoffOut, FlagGuessIn, RankingGuessIn, PlaceGuessIn
from app.schemas.season import RaceOut
from app.services import guesses
from app.services.cutoff import CutoffGate

router = APIRouter(prefix="/guesses", tags=["Guesses"])


# --- PLAZOS ---
@router.get("/seasons/{season_id}/cutoff", response_model=CutoffOut)
def season_cutoff(season_id: int, gate: CutoffGate = Depends(get_gate), current_user = Depends(get_current_user)):
    try:
        return CutoffOut(
            cutoff=gate.season_deadline(season_id),
            is_open=gate.is_open_season(season_id),
            seconds_left=gate.seconds_left_season(season_id),
        )
    except F1GuessError as e:
        raise http_error(e)


@router.get("/races/{race_id}/cutoff", response_model=CutoffOut)
def race_cutoff(race_id: int, gate: CutoffGate = Depends(get_gate), current_user = Depends(get_current_user)):
    try:
        return CutoffOut(
            cutoff=gate.race_deadline(race_id),
            is_open=gate.is_open_race(race_id),
            seconds_left=gate.seconds_left_race(race_id),
        )
    except F1GuessError as e:
        raise http_error(e)


# --- APUESTAS DE TEMPORADA ---
@router.put("/seasons/{season_id}/drivers")
def put_driver_ranking(
    season_id: int,
    body: RankingGuessIn,
    db: Session = Depends(get_db),
    gate: CutoffGate = Depends(get_gate),
    current_user = Depends(get_current_user)
):
    try:
        guesses.set_driver_ranking(db, gate, current_user.id, season_id, body.ranking)
    except F1GuessError as e:
        raise http_error(e)
    return {"message": "Ranking de pilotos guardado"}


@router.get("/seasons/{season_id}/drivers")
def get_driver_ranking(season_id: int, db: Session = Depends(get_db), current_user = Depends(get_current_user)):
    return guesses.get_driver_ranking(db, current_user.id, season_id)


@router.put("/seasons/{season_id}/constructors")
def put_constructor_ranking(
    season_id: int,
    body: RankingGuessIn,
    db: Session = Depends(get_db),
    gate: CutoffGate = Depends(get_gate),
    current_user = Depends(get_current_user)
):
    try:
        guesses.set_constructor_ranking(db, gate, current_user.id, season_id, body.ranking)
    except F1GuessError as e:
        raise http_error(e)
    return {"message": "Ranking de escuderías guardado"}


@router.get("/seasons/{season_id}/constructors")
def get_constructor_ranking(season_id: int, db: Session = Depends(get_db), current_user = Depends(get_current_user)):
    return guesses.get_constructor_ranking(db, current_user.id, season_id)


@router.put("/seasons/{season_id}/flags")
def put_flags(
    season_id: int,
    body: FlagGuessIn,
    db: Session = Depends(get_db),
    gate: CutoffGate = Depends(get_gate),
    current_user = Depends(get_current_user)
):
    try:
        guesses.set_flag_guesses(db, gate, current_user.id, season_id, body.amounts)
    except F1GuessError as e:
        raise http_error(e)
    return {"message": "Banderas guardadas"}


@router.get("/seasons/{season_id}/flags")
def get_flags(season_id: int, db: Session = Depends(get_db), current_user = Depends(get_current_user)):
    return guesses.get_flag_guesses(db, current_user.id, season_id)


# --- APUESTAS DE CARRERA ---
@router.get("/seasons/{season_id}/current-race", response_model=RaceOut)
def current_race(season_id: int, db: Session = Depends(get_db), current_user = Depends(get_current_user)):
    try:
        return guesses.current_race_to_guess(db, season_id)
    except F1GuessError as e:
        raise http_error(e)


@router.put("/races/{race_id}")
def put_place_guess(
    race_id: int,
    body: PlaceGuessIn,
    db: Session = Depends(get_db),
    gate: CutoffGate = Depends(get_gate),
    current_user = Depends(get_current_user)
):
    try:
        guesses.set_place_guess(db, gate, current_user.id, race_id, body.category, body.driver_code)
    except F1GuessError as e:
        raise http_error(e)
    return {"message": "Apuesta guardada"}


@router.get("/races/{race_id}")
def get_place_guesses(race_id: int, db: Session = Depends(get_db), current_user = Depends(get_current_user)):
    return guesses.get_place_guesses(db, current_user.id, race_id)
