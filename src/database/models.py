from sqlalchemy import Integer, String, Text, UniqueConstraint, text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    pass


class CaseRecord(Base):
    __tablename__ = "case_table"
    __table_args__ = (UniqueConstraint("case_no", "year", name="uq_case_table_case_no_year"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    case_no: Mapped[int] = mapped_column(Integer, nullable=False)
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    nature_of_case: Mapped[str] = mapped_column(Text, nullable=False)
    received_from: Mapped[str] = mapped_column(Text, nullable=False)
    # dates and times are kept as ISO text, legacy rows may hold anything
    date: Mapped[str] = mapped_column(String(10), nullable=False, index=True)
    time_slot: Mapped[str] = mapped_column(String(8), nullable=False)
    party1: Mapped[str] = mapped_column(Text, nullable=False)
    party2: Mapped[str] = mapped_column(Text, nullable=False)
    assigned_to: Mapped[str] = mapped_column(Text, nullable=False)
    ndoh_date: Mapped[str] = mapped_column(String(10), nullable=True, index=True)
    ndoh_time: Mapped[str] = mapped_column(String(8), nullable=True)
    disposal_of_case: Mapped[str] = mapped_column(Text, nullable=True)
    connected: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default=text("0")
    )


class AssignedTo(Base):
    __tablename__ = "assigned_to"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(Text, unique=True, nullable=False)
