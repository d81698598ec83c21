"""
Build API — Aggregate SQLAlchemy Model
========================================

What:  ORM model representing the `Aggregates` table in SQLite.
Why:   Maps construction-material records to rows; `Base.metadata.create_all`
       reads it to create the table on startup.
Who:   Used by AggregateStore for every CRUD statement and by the seeding CLI.

Table Design:
    - id: INTEGER PRIMARY KEY AUTOINCREMENT. With AUTOINCREMENT, SQLite never
      hands out an id again after the row holding it is deleted.
    - name: TEXT NOT NULL, the only required column
    - looseDensity / compactedDensity: REAL, kg/m³, nullable
    - category: TEXT, free-form label, nullable

Column names keep their camelCase spelling in the database so the table
matches the JSON representation one-to-one.
"""

from typing import Any

from sqlalchemy import Integer, Text
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.types import UserDefinedType

from buildapi.database import Base


class LooseReal(UserDefinedType):
    """
    A REAL column with no Python-side conversion in either direction.

    SQLAlchemy's Float calls float() on every bound value under SQLite, which
    rejects non-numeric input. Values here go to the driver unchanged and
    SQLite's REAL affinity decides how they are stored.
    """

    cache_ok = True

    def get_col_spec(self, **kw):
        return "REAL"


class Aggregate(Base):
    """
    A construction-material record.

    Lifecycle:
        1. Inserted by create (the store assigns `id`)
        2. Fully replaced by update (all four mutable columns, id unchanged)
        3. Removed by delete (no soft-delete, no history)
    """

    __tablename__ = "Aggregates"
    __table_args__ = {"sqlite_autoincrement": True}

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    # Not validated beyond presence; anything truthy the client sent is stored
    name: Mapped[Any] = mapped_column("name", Text, nullable=False)

    # REAL affinity: numeric strings are converted by SQLite, anything else kept as-is
    loose_density: Mapped[Any] = mapped_column("looseDensity", LooseReal(), nullable=True)
    compacted_density: Mapped[Any] = mapped_column("compactedDensity", LooseReal(), nullable=True)

    category: Mapped[Any] = mapped_column("category", Text, nullable=True)

    def to_dict(self) -> dict:
        """Row in its JSON shape (camelCase keys)."""
        return {
            "id": self.id,
            "name": self.name,
            "looseDensity": self.loose_density,
            "compactedDensity": self.compacted_density,
            "category": self.category,
        }

    def __repr__(self) -> str:
        return f"<Aggregate(id={self.id}, name='{self.name}', category='{self.category}')>"
