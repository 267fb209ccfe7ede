import logging
from sqlalchemy import func
from sqlalchemy.orm import Session

from app.core.exceptions import (
    DuplicateEntryError,
    InvalidScoringEntryError,
    ScoringTableNotConfiguredError,
)
from app.db.models.category import Category
from app.db.models.scoring_entry import ScoringEntry

logger = logging.getLogger(__name__)


def get_table(db: Session, season_id: int, category: Category) -> dict[int, int]:
    """
    Devuelve: {diff: puntos} ordenado por diff ascendente.
    Un diccionario vacío es válido (no hay entradas configuradas).
    """
    rows = (
        db.query(ScoringEntry.diff, ScoringEntry.points)
        .filter(
            ScoringEntry.season_id == season_id,
            ScoringEntry.category == category
        )
        .order_by(ScoringEntry.diff)
        .all()
    )
    return {diff: points for diff, points in rows}


def max_diff(db: Session, season_id: int, category: Category) -> int:
    result = (
        db.query(func.max(ScoringEntry.diff))
        .filter(
            ScoringEntry.season_id == season_id,
            ScoringEntry.category == category
        )
        .scalar()
    )
    if result is None:
        raise ScoringTableNotConfiguredError(season_id, category)
    return result


def points_for(table: dict[int, int], diff: int | None) -> int:
    """
    Puntos de un diff según la tabla.
    - None (apuesta de podio fallada) -> 0
    - diff por encima del máximo configurado -> 0
    - diff sin entrada propia (la tabla es dispersa) -> 0
    """
    if diff is None or not table:
        return 0
    if diff > max(table):
        return 0
    return table.get(diff, 0)


def add_entry(db: Session, season_id: int, category: Category, diff: int) -> ScoringEntry:
    """Añade un diff nuevo con 0 puntos. El admin le pone valor después con set_points."""
    if diff < 0:
        raise InvalidScoringEntryError("El diff no puede ser negativo")

    exists = (
        db.query(ScoringEntry)
        .filter(
            ScoringEntry.season_id == season_id,
            ScoringEntry.category == category,
            ScoringEntry.diff == diff
        )
        .first()
    )
    if exists:
        raise DuplicateEntryError(
            f"El diff {diff} ya existe para {category.value} en la temporada {season_id}"
        )

    entry = ScoringEntry(season_id=season_id, category=category, diff=diff, points=0)
    db.add(entry)
    db.commit()
    db.refresh(entry)

    logger.info("Entrada de puntos añadida: temporada=%s categoría=%s diff=%s", season_id, category.value, diff)
    return entry


def set_points(db: Session, season_id: int, category: Category, diff: int, points: int) -> int:
    """
    Cambia los puntos de un diff existente.
    Devuelve el nº de filas afectadas: 0 si el diff no existe (no se crea).
    """
    updated = (
        db.query(ScoringEntry)
        .filter(
            ScoringEntry.season_id == season_id,
            ScoringEntry.category == category,
            ScoringEntry.diff == diff
        )
        .update({ScoringEntry.points: points}, synchronize_session=False)
    )
    db.commit()

    if updated:
        logger.info(
            "Entrada de puntos actualizada: temporada=%s categoría=%s diff=%s puntos=%s",
            season_id, category.value, diff, points,
        )
    return updated


def remove_entry(db: Session, season_id: int, category: Category, diff: int) -> int:
    deleted = (
        db.query(ScoringEntry)
        .filter(
            ScoringEntry.season_id == season_id,
            ScoringEntry.category == category,
            ScoringEntry.diff == diff
        )
        .delete(synchronize_session=False)
    )
    db.commit()

    if deleted:
        logger.info("Entrada de puntos eliminada: temporada=%s categoría=%s diff=%s", season_id, category.value, diff)
    return deleted


def copy_table(db: Session, from_season_id: int, to_season_id: int) -> int:
    """
    Copia la tabla de puntos de una temporada a otra.
    Solo rellena las categorías que en la temporada destino están vacías,
    para no pisar lo que el admin ya haya configurado.
    """
    copied = 0
    for category in Category:
        if get_table(db, to_season_id, category):
            continue
        for diff, points in get_table(db, from_season_id, category).items():
            db.add(ScoringEntry(
                season_id=to_season_id,
                category=category,
                diff=diff,
                points=points
            ))
            copied += 1

    db.commit()
    logger.info("Copiadas %s entradas de puntos de la temporada %s a la %s", copied, from_season_id, to_season_id)
    return copied
