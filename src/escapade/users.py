"""Player records."""

import datetime as dt

from sqlmodel import Session, select

from .logging import get_logger
from .models import Player, Playthrough

logger = get_logger(__name__)


def get_or_create_player(session: Session, fingerprint: str) -> Player:
    """Get existing player or create new one from certificate fingerprint."""
    statement = select(Player).where(Player.fingerprint == fingerprint)
    player = session.exec(statement).first()

    if player:
        player.last_seen = dt.datetime.now(dt.UTC)
        logger.debug("player_accessed", fingerprint=fingerprint)
    else:
        player = Player(fingerprint=fingerprint)
        session.add(player)
        logger.info("player_created", fingerprint=fingerprint)

    session.commit()
    session.refresh(player)
    return player


def list_playthroughs(session: Session, player: Player, limit: int = 10) -> list[Playthrough]:
    """Most recent finished or abandoned games first."""
    statement = (
        select(Playthrough)
        .where(Playthrough.player_id == player.id)
        .order_by(Playthrough.finished_at.desc(), Playthrough.id.desc())
        .limit(limit)
    )
    return list(session.exec(statement).all())
