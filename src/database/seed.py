from sqlalchemy.dialects.sqlite import insert
from sqlalchemy.orm import Session

from database.models import AssignedTo

DEFAULT_ASSIGNEES = [
    "Sh_Rajesh_Kumar_Sharma",
    "Smt_Anita_Verma",
    "Sh_Suresh_Chand_Gupta",
    "Ms_Priya_Malhotra",
    "Sh_Harish_Mehta",
    "Smt_Kavita_Rani",
    "Sh_Vinod_Kumar",
    "Sh_Anil_Kumar_Jain",
    "Ms_Neha_Arora",
    "Sh_Mahesh_Chander",
    "Smt_Sunita_Yadav",
    "Sh_Ramesh_Chand_Bansal",
    "Ms_Deepika_Sethi",
    "Sh_Pawan_Kumar_Goel",
    "Smt_Meenakshi_Rana",
    "Sh_Jagdish_Prasad",
    "Sh_Naveen_Khurana",
    "Ms_Ritu_Saini",
]


def insert_assignees(session: Session, names: list[str]) -> int:
    """Insert-or-ignore registry names, returns how many were new."""
    rows = [{"name": name} for name in names if name]
    if not rows:
        return 0
    stmt = insert(AssignedTo.__table__).values(rows).on_conflict_do_nothing(index_elements=["name"])
    return session.execute(stmt).rowcount or 0


def seed_assignees(session: Session) -> int:
    return insert_assignees(session, DEFAULT_ASSIGNEES)
