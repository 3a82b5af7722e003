"""
SQLAlchemy ORM Models for the Recall Database

Defines LearnerModel, CardModel and ItemModel. Items belong to a learner and
are cascaded with it; cards are shared content and are never cascaded.
"""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()


class LearnerModel(Base):
    """A learner owning zero or more items."""
    __tablename__ = 'learners'

    id = Column(String(255), primary_key=True)
    name = Column(String(255), nullable=False, default="")

    items = relationship(
        "ItemModel",
        back_populates="learner",
        cascade="all, delete-orphan",
        passive_deletes=True
    )

    def __repr__(self):
        return f"<LearnerModel({self.id})>"


class CardModel(Base):
    """Study content. Owned by the host application."""
    __tablename__ = 'cards'

    id = Column(String(255), primary_key=True)
    front = Column(Text, nullable=False)
    back = Column(Text, nullable=False, default="")
    tags = Column(Text, nullable=False, default="")  # newline-separated

    def __repr__(self):
        return f"<CardModel({self.id})>"


class ItemModel(Base):
    """
    Review progress of one learner on one card.

    The autoincrement id doubles as the insertion position.
    """
    __tablename__ = 'items'
    __table_args__ = (
        UniqueConstraint('learner_id', 'card_id', name='uq_items_learner_card'),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)

    learner_id = Column(String(255), ForeignKey('learners.id', ondelete='CASCADE'), nullable=False, index=True)
    card_id = Column(String(255), ForeignKey('cards.id'), nullable=False)

    # Scheduling state
    progress_level = Column(Integer, nullable=False, default=0)
    due_at = Column(DateTime(timezone=True), nullable=True)  # NULL = never tested
    consecutive_correct = Column(Integer, nullable=False, default=0)
    last_result = Column(String(20), nullable=False, default="none")

    # Review tracking
    times_right = Column(Integer, nullable=False, default=0)
    times_wrong = Column(Integer, nullable=False, default=0)
    last_reviewed_at = Column(DateTime(timezone=True), nullable=True)
    added_at = Column(DateTime(timezone=True), nullable=False)

    learner = relationship("LearnerModel", back_populates="items")

    def __repr__(self):
        return f"<ItemModel({self.learner_id}, {self.card_id}, level={self.progress_level})>"
