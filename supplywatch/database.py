from __future__ import annotations

from typing import Iterator

from fastapi import Request
from sqlalchemy import create_engine, text
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker
from sqlalchemy.pool import StaticPool


class Base(DeclarativeBase):
    pass


class Database:
    """
    Explizit erzeugter Store-Client: wird beim Start geöffnet (open) und
    beim Herunterfahren geschlossen (close). Keine globale Instanz.
    """

    def __init__(self, url: str):
        self.url = url
        connect_args = {}
        kwargs = {"pool_pre_ping": True}
        if url.startswith("sqlite"):
            # Für SQLite + FastAPI Threading:
            connect_args["check_same_thread"] = False
            if url in ("sqlite://", "sqlite:///:memory:"):
                # In-Memory-DB muss über alle Sessions dieselbe Verbindung teilen
                kwargs["poolclass"] = StaticPool
        self.engine = create_engine(url, connect_args=connect_args, **kwargs)
        self.SessionLocal = sessionmaker(bind=self.engine, autocommit=False, autoflush=False)

    def open(self) -> None:
        """Verbindung prüfen und Tabellen anlegen; wirft bei nicht erreichbarem Store."""
        # Model registrieren
        from supplywatch import models_sql  # noqa: F401

        with self.engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        Base.metadata.create_all(bind=self.engine)

    def close(self) -> None:
        self.engine.dispose()

    def session(self) -> Session:
        return self.SessionLocal()


# FastAPI-Dependency:
def get_db(request: Request) -> Iterator[Session]:
    db = request.app.state.database.session()
    try:
        yield db
    finally:
        db.close()
