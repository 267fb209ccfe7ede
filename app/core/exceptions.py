"""
Errores de dominio del núcleo de cutoff y puntuación.

Los servicios lanzan estas excepciones; los routers las traducen a
HTTPException. "No configurado" y "no encontrado" son condiciones distintas
de "resultado vacío": una lista vacía nunca se convierte en error.
"""


class F1GuessError(Exception):
    """Base de todos los errores del dominio."""


# --- NO CONFIGURADO ---
class NotConfiguredError(F1GuessError):
    """Falta configuración obligatoria (cutoff o tabla de puntos)."""


class CutoffNotConfiguredError(NotConfiguredError):
    def __init__(self, scope: str, key: int):
        self.scope = scope
        self.key = key
        super().__init__(f"No hay cutoff configurado para {scope} {key}")


class ScoringTableNotConfiguredError(NotConfiguredError):
    def __init__(self, season_id: int, category):
        self.season_id = season_id
        self.category = category
        super().__init__(
            f"La tabla de puntos de la temporada {season_id} no tiene entradas para {category}"
        )


# --- NO ENCONTRADO ---
class NotFoundError(F1GuessError):
    """Se esperaba exactamente una fila y no existe ninguna."""


class SnapshotNotFoundError(NotFoundError):
    pass


# --- ESCRITURA DE PREDICCIONES ---
class GuessingClosedError(F1GuessError):
    """El cutoff ya ha pasado: no se aceptan más predicciones."""


class InvalidGuessError(F1GuessError):
    pass


class DuplicateEntryError(F1GuessError):
    pass


class InvalidScoringEntryError(F1GuessError):
    pass
