"""SQLAlchemy model for the single ``equipment`` table.

``kind`` is the discriminator; each kind-specific attribute has its own column
and the columns that do not belong to a row's kind stay NULL.
"""

from __future__ import annotations

from sqlalchemy import CheckConstraint, Column, Integer, Text

from ..db.session import Base


class Equipment(Base):
    __tablename__ = "equipment"
    __table_args__ = (
        CheckConstraint("floor BETWEEN 0 AND 9", name="ck_equipment_floor"),
        CheckConstraint("room BETWEEN 0 AND 999", name="ck_equipment_room"),
        CheckConstraint("value_isk >= 0", name="ck_equipment_value"),
        # AUTOINCREMENT keeps SQLite from handing out the id of a deleted row.
        {"sqlite_autoincrement": True},
    )

    id = Column(Integer, primary_key=True)
    kind = Column(Text, nullable=False)
    building = Column(Text, nullable=False)
    floor = Column(Integer, nullable=False)
    room = Column(Integer, nullable=False)
    value_isk = Column(Integer, nullable=False)
    seats = Column(Integer, nullable=True)
    chair_kind = Column(Text, nullable=True)
    lumens = Column(Integer, nullable=True)

    def __repr__(self) -> str:
        return (
            f"<Equipment id={self.id} kind={self.kind!r} building={self.building!r} "
            f"floor={self.floor} room={self.room}>"
        )


__all__ = ["Equipment"]
