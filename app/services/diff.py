"""
Cálculo de la distancia ("diff") entre una apuesta y el resultado real.

Funciones puras: reciben listas/diccionarios ya leídos de la BD y no
tocan la sesión. El motor de puntuación se encarga de la E/S.
"""
from typing import Iterable, Mapping, Sequence


def build_real_positions_map(standings: Sequence[str]) -> dict[str, int]:
    """
    Devuelve: {competidor: posición}, con posiciones empezando en 1
    según el orden de la lista.
    """
    return {
        competitor: index
        for index, competitor in enumerate(standings, start=1)
    }


def rank_diffs(guessed: Sequence[str], standings: Sequence[str]) -> list[int]:
    """
    Diff por competidor para las categorías de ranking (pilotos/constructores).

    Recorre la clasificación real y, para cada competidor que el usuario
    colocó en su ranking, calcula |posición apostada - posición real|.
    Los competidores que el usuario no colocó se ignoran.
    """
    guessed_map = build_real_positions_map(guessed)
    diffs = []

    for competitor, real_pos in build_real_positions_map(standings).items():
        guessed_pos = guessed_map.get(competitor)
        if guessed_pos is None:
            continue
        diffs.append(abs(guessed_pos - real_pos))

    return diffs


def count_diffs(guessed: Mapping, actual: Mapping) -> list[int]:
    """
    Diff por tipo de bandera: |apostado - contado hasta ahora|.
    Si un tipo no aparece en `actual` es que no ha ocurrido todavía (0).
    """
    return [
        abs(amount - actual.get(flag, 0))
        for flag, amount in guessed.items()
    ]


def place_diff(guessed_driver: str, finishing_order: Mapping[int, str], target_position: int) -> int | None:
    """
    Apuesta de podio: acierto exacto o nada.
    0 si el piloto apostado terminó exactamente en `target_position`,
    None ("sin acierto") en cualquier otro caso.
    """
    if finishing_order.get(target_position) == guessed_driver:
        return 0
    return None


def count_flags(flags: Iterable) -> dict:
    """Devuelve: {flag: nº de apariciones}."""
    counts: dict = {}
    for flag in flags:
        counts[flag] = counts.get(flag, 0) + 1
    return counts
