"""SQLAlchemy 2.0 ORM models for the agent registration index.

Two tables:
    1. agent_registrations — wallet -> agent id, replayed from Registered events.
    2. index_cursor        — last block fully replayed, per index name.

Design decisions:
    - agent_id is the primary key (registry ids are unique and 1-based).
    - owner_wallet is stored lower-case so lookups need no case folding.
    - The cursor only moves after a chunk of registrations is written, so a
      failed sync re-reads the same blocks next time.
"""

from __future__ import annotations

from datetime import UTC, datetime

from sqlalchemy import BigInteger, DateTime, Integer, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


class AgentRegistration(Base):
    """One agent identity as announced by the identity registry."""

    __tablename__ = "agent_registrations"

    agent_id: Mapped[int] = mapped_column(
        BigInteger,
        primary_key=True,
        autoincrement=False,
    )
    owner_wallet: Mapped[str] = mapped_column(
        String(42),
        nullable=False,
        index=True,
        comment="Lower-cased owner address at registration time",
    )
    agent_uri: Mapped[str] = mapped_column(Text, nullable=False, default="")
    block_number: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    indexed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(UTC),
    )

    def __repr__(self) -> str:
        return f"<AgentRegistration id={self.agent_id} owner={self.owner_wallet}>"


class IndexCursor(Base):
    """Replay position of an event index."""

    __tablename__ = "index_cursor"

    name: Mapped[str] = mapped_column(String(64), primary_key=True)
    last_block: Mapped[int] = mapped_column(BigInteger, nullable=False, default=-1)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(UTC),
    )
    registrations: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
