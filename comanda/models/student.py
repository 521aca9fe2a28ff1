"""
Comanda — Student registry (configuration data)

Students are ordered for by their guardians through the school lunch
channels. Grades and sections are the school's own labels.
"""
import uuid
from datetime import datetime
from enum import Enum as PyEnum

from sqlalchemy import DateTime, Enum, String
from sqlalchemy.orm import Mapped, mapped_column

from comanda.core.clock import utcnow
from comanda.db.database import Base


class Grade(str, PyEnum):
    RED_ROOM = "RED ROOM"
    YELLOW_ROOM = "YELLOW ROOM"
    GREEN_ROOM = "GREEN ROOM"
    PRIMARY_1 = "PRIMERO DE PRIMARIA"
    PRIMARY_2 = "SEGUNDO DE PRIMARIA"
    PRIMARY_3 = "TERCERO DE PRIMARIA"
    PRIMARY_4 = "CUARTO DE PRIMARIA"
    PRIMARY_5 = "QUINTO DE PRIMARIA"
    PRIMARY_6 = "SEXTO DE PRIMARIA"
    SECONDARY_1 = "PRIMERO DE SECUNDARIA"
    SECONDARY_2 = "SEGUNDO DE SECUNDARIA"
    SECONDARY_3 = "TERCERO DE SECUNDARIA"
    SECONDARY_4 = "CUARTO DE SECUNDARIA"
    SECONDARY_5 = "QUINTO DE SECUNDARIA"


class Section(str, PyEnum):
    A = "A"
    B = "B"


def _enum_values(enum_cls):
    return [member.value for member in enum_cls]


class Student(Base):
    __tablename__ = "students"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    full_name: Mapped[str] = mapped_column(String(255), index=True, nullable=False)
    grade: Mapped[Grade] = mapped_column(
        Enum(Grade, name="student_grade", values_callable=_enum_values), nullable=False
    )
    section: Mapped[Section] = mapped_column(
        Enum(Section, name="student_section", values_callable=_enum_values), nullable=False
    )
    guardian_name: Mapped[str] = mapped_column(String(255), nullable=False)
    phone: Mapped[str | None] = mapped_column(String(32), index=True, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    def __repr__(self) -> str:
        return f"<Student {self.full_name} {self.grade.value} {self.section.value}>"
