"""Database models for Escapade.

Game state itself is never stored; only who played and how it went.
"""

import datetime as dt

from sqlmodel import Field, SQLModel


class Player(SQLModel, table=True):
    id: int | None = Field(default=None, primary_key=True)
    fingerprint: str = Field(unique=True, index=True)
    created_at: dt.datetime = Field(
        default_factory=lambda: dt.datetime.now(dt.UTC)
    )
    last_seen: dt.datetime = Field(
        default_factory=lambda: dt.datetime.now(dt.UTC)
    )


class Playthrough(SQLModel, table=True):
    id: int | None = Field(default=None, primary_key=True)
    player_id: int = Field(foreign_key="player.id", index=True)
    title: str
    turns: int = 0
    outcome: str = "abandoned"  # "escaped", "out_of_time", "ended", "abandoned"
    final_location: str = ""
    started_at: dt.datetime = Field(
        default_factory=lambda: dt.datetime.now(dt.UTC)
    )
    finished_at: dt.datetime = Field(
        default_factory=lambda: dt.datetime.now(dt.UTC)
    )
