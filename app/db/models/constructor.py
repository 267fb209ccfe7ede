from sqlalchemy import String, Integer, ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship
from app.db.session import Base


class Constructor(Base):
    __tablename__ = "constructors"
    __table_args__ = (
        UniqueConstraint("season_id", "name", name="uq_season_constructor"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    season_id: Mapped[int] = mapped_column(Integer, ForeignKey("seasons.id"), nullable=False)
    name: Mapped[str] = mapped_column(String, nullable=False) # Ej: Ferrari
    color: Mapped[str] = mapped_column(String, default="#000000") # Ej: #FF0000
    position: Mapped[int] = mapped_column(Integer, nullable=False)

    # Relaciones
    season: Mapped["Season"] = relationship("Season", back_populates="constructors")
    drivers: Mapped[list["Driver"]] = relationship("Driver", back_populates="constructor")
