# Importa todos los modelos para que Base.metadata los conozca antes de create_all
from app.db.models.user import User
from app.db.models.season import Season
from app.db.models.race import Race
from app.db.models.driver import Driver
from app.db.models.constructor import Constructor
from app.db.models.starting_grid import StartingGrid
from app.db.models.race_result import RaceResult
from app.db.models.race_position import RacePosition
from app.db.models.standings import DriverStanding, ConstructorStanding
from app.db.models.flag_stat import FlagStat
from app.db.models.scoring_entry import ScoringEntry
from app.db.models.cutoff import SeasonCutoff, RaceCutoff
from app.db.models.guess import DriverGuess, ConstructorGuess, FlagGuess, PlaceGuess
from app.db.models.placement import (
    RacePlacement,
    RaceCategoryPlacement,
    SeasonStartPlacement,
    SeasonStartCategoryPlacement,
    SeasonPlacement,
)
