"""
SQLAlchemy ORM Models for the SRS Database

Defines Card, MemoryLevel and ReviewLog models for Postgres persistence.
"""

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class Card(Base):
    """
    A flashcard owned by the deck (vocab, kanji, particle, grammar).

    Cards are soft-deleted; their memory state and review logs are kept.
    """
    __tablename__ = 'cards'

    id = Column(String(255), primary_key=True)
    type = Column(String(50), nullable=False)
    front = Column(Text, nullable=False)
    back = Column(Text, nullable=True)
    deleted = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), nullable=True)

    def __repr__(self):
        return f"<Card({self.id}, {self.type}, {self.front!r})>"


class MemoryLevel(Base):
    """
    Persistent memory state for a single card.

    One row per card, upserted after every grading event.
    """
    __tablename__ = 'memory_levels'

    card_id = Column(String(255), ForeignKey('cards.id'), primary_key=True)
    type = Column(String(50), nullable=True)

    # Scheduling state
    level = Column(Integer, nullable=False, default=0)
    stability = Column(Float, nullable=False, default=1.0)
    difficulty = Column(Float, nullable=False, default=5.0)
    last_reviewed_at = Column(DateTime(timezone=True), nullable=True)
    due = Column(DateTime(timezone=True), nullable=True)

    # Derived from review_logs on every grade
    leech_count = Column(Integer, nullable=False, default=0)
    is_leech = Column(Boolean, nullable=False, default=False)

    last_learned_at = Column(DateTime(timezone=True), nullable=True)
    updated_at = Column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        Index('idx_memory_levels_type_due', 'type', 'due'),
    )

    def __repr__(self):
        return f"<MemoryLevel({self.card_id}, level={self.level}, S={self.stability}, D={self.difficulty})>"


class ReviewLog(Base):
    """
    Append-only log entry for one grading event.

    Rows are never updated or deleted. meta holds the grade source and
    per-stage scores.
    """
    __tablename__ = 'review_logs'

    id = Column(Integer, primary_key=True, autoincrement=True)
    card_id = Column(String(255), nullable=False)
    quality = Column(Integer, nullable=True)  # 0-5; NULL only in legacy rows
    created_at = Column(DateTime(timezone=True), nullable=False)
    meta = Column(JSON, nullable=True)

    __table_args__ = (
        Index('idx_review_logs_card_created', 'card_id', 'created_at'),
    )

    def __repr__(self):
        return f"<ReviewLog(id={self.id}, {self.card_id}, quality={self.quality})>"
