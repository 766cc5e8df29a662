import os

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool


def create_sqlite_engine(path: str | os.PathLike, echo: bool = False) -> Engine:
    # one shared connection, callers serialize access themselves
    return create_engine(
        f"sqlite:///{os.fspath(path)}",
        echo=echo,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )


def create_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(engine, expire_on_commit=False)
