from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from app.core.deps import get_db, get_gate, get_current_user, http_error
from app.core.exceptions import F1GuessError
from app.schemas.scoring import Summary, LeaderboardRow, Medals, SeasonPlacementOut, SeriesPoint
from app.schemas.user import UserOut
from app.services import leaderboard
from app.services.cutoff import CutoffGate
from app.services.guesses import season_guessers
from app.services.snapshots import RaceSnapshotStore, SeasonStartSnapshotStore

router = APIRouter(prefix="/stats", tags=["Stats"])


def _rows(snapshot):
    return [{"user_id": user_id, "summary": summary} for user_id, summary in snapshot]


# --- RESÚMENES POR CLAVE ---
@router.get("/races/{race_id}/summaries")
def race_summaries(race_id: int, db: Session = Depends(get_db), current_user = Depends(get_current_user)):
    return _rows(RaceSnapshotStore(db).read_all(race_id))


@router.get("/races/{race_id}/summaries/{user_id}", response_model=Summary)
def race_summary(race_id: int, user_id: int, db: Session = Depends(get_db), current_user = Depends(get_current_user)):
    try:
        return RaceSnapshotStore(db).read(race_id, user_id)
    except F1GuessError as e:
        raise http_error(e)


@router.get("/seasons/{season_id}/start/summaries")
def season_start_summaries(season_id: int, db: Session = Depends(get_db), current_user = Depends(get_current_user)):
    return _rows(SeasonStartSnapshotStore(db).read_all(season_id))


@router.get("/seasons/{season_id}/start/summaries/{user_id}", response_model=Summary)
def season_start_summary(
    season_id: int, user_id: int, db: Session = Depends(get_db), current_user = Depends(get_current_user)
):
    try:
        return SeasonStartSnapshotStore(db).read(season_id, user_id)
    except F1GuessError as e:
        raise http_error(e)


# --- TEMPORADA ---
@router.get("/seasons/{season_id}/guessers", response_model=list[UserOut])
def guessers(season_id: int, db: Session = Depends(get_db), current_user = Depends(get_current_user)):
    return season_guessers(db, season_id)


@router.get("/seasons/{season_id}/leaderboard", response_model=list[LeaderboardRow])
def season_leaderboard(season_id: int, db: Session = Depends(get_db), current_user = Depends(get_current_user)):
    return leaderboard.season_leaderboard(db, season_id)


@router.get("/seasons/{season_id}/series", response_model=dict[str, list[SeriesPoint]])
def points_series(season_id: int, db: Session = Depends(get_db), current_user = Depends(get_current_user)):
    return leaderboard.points_series(db, season_id)


@router.get("/seasons/{season_id}/cutoffs")
def race_cutoffs(season_id: int, gate: CutoffGate = Depends(get_gate), current_user = Depends(get_current_user)):
    return [
        {"race_id": race.id, "position": race.position, "name": race.name, "cutoff": cutoff}
        for race, cutoff in gate.race_cutoffs(season_id)
    ]


# --- PALMARÉS ---
@router.get("/users/{user_id}/medals", response_model=Medals)
def medals(user_id: int, db: Session = Depends(get_db), current_user = Depends(get_current_user)):
    return leaderboard.medals(db, user_id)


@router.get("/users/{user_id}/placements", response_model=list[SeasonPlacementOut])
def previous_placements(user_id: int, db: Session = Depends(get_db), current_user = Depends(get_current_user)):
    return leaderboard.previous_placements(db, user_id)
