"""
Snapshot Store: guarda el Summary de cada jugador por clave.

Hay dos almacenes independientes con la misma API:
  - RaceSnapshotStore:        clave = race_id
  - SeasonStartSnapshotStore: clave = season_id (antes de la primera carrera)

Escribir es REPLACE por (clave, jugador). Las filas de categoría que ya no
forman parte del Summary nuevo se borran en la misma escritura, así que
recalcular nunca deja categorías huérfanas de una ejecución anterior.
"""
from sqlalchemy.orm import Session

from app.core.exceptions import SnapshotNotFoundError
from app.db.models.placement import (
    RaceCategoryPlacement,
    RacePlacement,
    SeasonStartCategoryPlacement,
    SeasonStartPlacement,
)
from app.schemas.scoring import Placement, Summary


class SnapshotStore:
    total_model: type
    category_model: type
    key_name: str

    def __init__(self, db: Session):
        self.db = db

    def _pk(self, key: int, user_id: int, **extra) -> dict:
        return {self.key_name: key, "user_id": user_id, **extra}

    def _key_col(self, model):
        return getattr(model, self.key_name)

    def write(self, key: int, user_id: int, summary: Summary) -> None:
        total = self.db.get(self.total_model, self._pk(key, user_id))
        if total is None:
            total = self.total_model(**self._pk(key, user_id))
            self.db.add(total)
        total.placement = summary.total.position
        total.points = summary.total.points

        # Fuera las categorías que ya no se puntúan
        (
            self.db.query(self.category_model)
            .filter(
                self._key_col(self.category_model) == key,
                self.category_model.user_id == user_id,
                self.category_model.category.not_in(list(summary.categories))
            )
            .delete(synchronize_session=False)
        )

        for category, placement in summary.categories.items():
            row = self.db.get(self.category_model, self._pk(key, user_id, category=category))
            if row is None:
                row = self.category_model(**self._pk(key, user_id, category=category))
                self.db.add(row)
            row.placement = placement.position
            row.points = placement.points

        self.db.commit()

    def read(self, key: int, user_id: int) -> Summary:
        total = self.db.get(self.total_model, self._pk(key, user_id))
        if total is None:
            raise SnapshotNotFoundError(
                f"No hay resumen para {self.key_name}={key} y usuario {user_id}"
            )

        rows = (
            self.db.query(self.category_model)
            .filter(
                self._key_col(self.category_model) == key,
                self.category_model.user_id == user_id
            )
            .all()
        )
        return Summary(
            categories={r.category: Placement(position=r.placement, points=r.points) for r in rows},
            total=Placement(position=total.placement, points=total.points),
        )

    def read_all(self, key: int) -> list[tuple[int, Summary]]:
        """Todos los resúmenes de la clave, ordenados por puesto. Lista vacía si no hay."""
        totals = (
            self.db.query(self.total_model)
            .filter(self._key_col(self.total_model) == key)
            .order_by(self.total_model.placement, self.total_model.user_id)
            .all()
        )
        if not totals:
            return []

        category_rows = (
            self.db.query(self.category_model)
            .filter(self._key_col(self.category_model) == key)
            .all()
        )
        by_user: dict[int, dict] = {}
        for r in category_rows:
            by_user.setdefault(r.user_id, {})[r.category] = Placement(position=r.placement, points=r.points)

        return [
            (
                t.user_id,
                Summary(
                    categories=by_user.get(t.user_id, {}),
                    total=Placement(position=t.placement, points=t.points),
                ),
            )
            for t in totals
        ]

    def has_key(self, key: int) -> bool:
        return (
            self.db.query(self.total_model)
            .filter(self._key_col(self.total_model) == key)
            .first()
        ) is not None


class RaceSnapshotStore(SnapshotStore):
    total_model = RacePlacement
    category_model = RaceCategoryPlacement
    key_name = "race_id"


class SeasonStartSnapshotStore(SnapshotStore):
    total_model = SeasonStartPlacement
    category_model = SeasonStartCategoryPlacement
    key_name = "season_id"
