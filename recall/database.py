"""
Database - SQLAlchemy Repository

Implements the Repository contract on top of the ORM models. Uses one
session per operation; every write is committed or rolled back as a unit.

This module handles ONLY database I/O.
Scheduling logic is handled by the algorithms package.
"""

from __future__ import annotations
import logging
from datetime import datetime, timezone
from typing import Iterable, Optional

from sqlalchemy import create_engine, event, inspect
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from recall.config import get_database_url
from recall.constants import LastResult
from recall.errors import DuplicateError, NotFoundError
from recall.item import Item, ProgressState, initialize_new_item
from recall.models import Base, CardModel, ItemModel, LearnerModel
from recall.repository import Repository
from recall.schemas import Card, Learner


logger = logging.getLogger(__name__)


# ---- Engine ----

def get_engine(database_url: Optional[str] = None) -> Engine:
    """
    Get SQLAlchemy engine for database connection.

    In-memory SQLite shares a single connection so every session sees the
    same database. Other URLs use connection pooling.

    Args:
        database_url: SQLAlchemy URL (defaults to config.get_database_url())

    Returns:
        SQLAlchemy Engine instance
    """
    url = database_url or get_database_url()

    if url.startswith("sqlite"):
        if url in ("sqlite://", "sqlite:///:memory:"):
            engine = create_engine(
                url,
                connect_args={"check_same_thread": False},
                poolclass=StaticPool,
                echo=False
            )
        else:
            engine = create_engine(url, echo=False)

        @event.listens_for(engine, "connect")
        def _enable_foreign_keys(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

        return engine

    return create_engine(
        url,
        pool_size=5,           # Keep 5 connections open
        max_overflow=10,       # Allow up to 10 extra connections
        pool_pre_ping=True,    # Verify connections before use
        echo=False
    )


def init_db(engine: Engine) -> None:
    """
    Initialize database schema if tables don't exist.

    Safe to call multiple times - only creates missing tables.
    """
    existing_tables = set(inspect(engine).get_table_names())
    missing = {"learners", "cards", "items"} - existing_tables
    if missing:
        Base.metadata.create_all(engine)
        logger.info("Created tables: %s", ", ".join(sorted(missing)))


def reset_db(engine: Engine) -> None:
    """
    DANGEROUS: Delete all data and recreate tables.

    Only use this for testing or when you want to start fresh.
    All review progress will be lost!
    """
    Base.metadata.drop_all(engine)
    logger.warning("All recall tables dropped")
    init_db(engine)


# ---- Conversion Helpers ----

def _to_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Normalize to UTC before storing (SQLite drops tzinfo)."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _from_db(value: Optional[datetime]) -> Optional[datetime]:
    """Timestamps read back without tzinfo are UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _item_from_row(row: ItemModel) -> Item:
    return Item(
        learner_id=row.learner_id,
        card_id=row.card_id,
        progress_level=row.progress_level,
        due_at=_from_db(row.due_at),
        consecutive_correct=row.consecutive_correct,
        last_result=LastResult(row.last_result),
        times_right=row.times_right,
        times_wrong=row.times_wrong,
        last_reviewed_at=_from_db(row.last_reviewed_at),
        position=row.id,
        added_at=_from_db(row.added_at)
    )


def _apply_item(row: ItemModel, item: Item) -> None:
    row.progress_level = item.progress_level
    row.due_at = _to_utc(item.due_at)
    row.consecutive_correct = item.consecutive_correct
    row.last_result = LastResult(item.last_result).value
    row.times_right = item.times_right
    row.times_wrong = item.times_wrong
    row.last_reviewed_at = _to_utc(item.last_reviewed_at)


def _card_from_row(row: CardModel) -> Card:
    tags = tuple(tag for tag in (row.tags or "").split("\n") if tag)
    return Card(id=row.id, front=row.front, back=row.back, tags=tags)


# ---- Repository ----

class SqlRepository(Repository):
    """Repository backed by a relational database through SQLAlchemy."""

    def __init__(self, engine: Engine, create_tables: bool = True):
        self.engine = engine
        self._session_factory = sessionmaker(bind=engine, expire_on_commit=False)
        if create_tables:
            init_db(engine)

    @classmethod
    def from_url(cls, database_url: Optional[str] = None) -> SqlRepository:
        return cls(get_engine(database_url))

    def get_session(self) -> Session:
        """Get a SQLAlchemy session for one repository operation."""
        return self._session_factory()

    def _item_query(self, session: Session, learner_id: str, card_id: str):
        return session.query(ItemModel).filter(
            ItemModel.learner_id == learner_id,
            ItemModel.card_id == card_id
        )

    # ---- Items ----

    def find_item(self, learner_id: str, card_id: str) -> Optional[Item]:
        session = self.get_session()
        try:
            row = self._item_query(session, learner_id, card_id).first()
            return _item_from_row(row) if row is not None else None
        finally:
            session.close()

    def create_item(
        self,
        learner_id: str,
        card_id: str,
        initial_state: Optional[ProgressState] = None
    ) -> Item:
        item = initialize_new_item(learner_id, card_id)
        if initial_state is not None:
            item = item.with_progress(initial_state)

        session = self.get_session()
        try:
            if self._item_query(session, learner_id, card_id).first() is not None:
                raise DuplicateError(
                    f"Card {card_id!r} is already in the deck of learner {learner_id!r}",
                    learner_id=learner_id,
                    card_id=card_id
                )

            row = ItemModel(learner_id=learner_id, card_id=card_id, added_at=_to_utc(item.added_at))
            _apply_item(row, item)
            session.add(row)
            try:
                session.commit()
            except IntegrityError as exc:
                session.rollback()
                if self._item_query(session, learner_id, card_id).first() is not None:
                    raise DuplicateError(
                        f"Card {card_id!r} is already in the deck of learner {learner_id!r}",
                        learner_id=learner_id,
                        card_id=card_id
                    ) from exc
                raise

            return _item_from_row(row)
        finally:
            session.close()

    def save_item(self, item: Item) -> None:
        session = self.get_session()
        try:
            row = self._item_query(session, item.learner_id, item.card_id).first()
            if row is None:
                raise NotFoundError(
                    f"Item {item.card_id!r} of learner {item.learner_id!r} no longer exists",
                    learner_id=item.learner_id,
                    card_id=item.card_id
                )
            _apply_item(row, item)
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def delete_item(self, learner_id: str, card_id: str) -> None:
        session = self.get_session()
        try:
            self._item_query(session, learner_id, card_id).delete(synchronize_session=False)
            session.commit()
        finally:
            session.close()

    def list_items(self, learner_id: str) -> list[Item]:
        session = self.get_session()
        try:
            rows = session.query(ItemModel).filter(ItemModel.learner_id == learner_id).all()
            return [_item_from_row(row) for row in rows]
        finally:
            session.close()

    def delete_all_items(self, learner_id: str) -> int:
        session = self.get_session()
        try:
            deleted = session.query(ItemModel).filter(
                ItemModel.learner_id == learner_id
            ).delete(synchronize_session=False)
            session.commit()
            return deleted
        finally:
            session.close()

    # ---- Learners ----

    def add_learner(self, learner: Learner) -> Learner:
        session = self.get_session()
        try:
            if session.get(LearnerModel, learner.id) is not None:
                raise DuplicateError(f"Learner {learner.id!r} already exists", learner_id=learner.id)
            session.add(LearnerModel(id=learner.id, name=learner.name))
            session.commit()
            return learner
        finally:
            session.close()

    def get_learner(self, learner_id: str) -> Optional[Learner]:
        session = self.get_session()
        try:
            row = session.get(LearnerModel, learner_id)
            return Learner(id=row.id, name=row.name) if row is not None else None
        finally:
            session.close()

    def delete_learner(self, learner_id: str) -> None:
        session = self.get_session()
        try:
            row = session.get(LearnerModel, learner_id)
            if row is not None:
                session.delete(row)
                session.commit()
        finally:
            session.close()

    # ---- Cards ----

    def add_card(self, card: Card) -> Card:
        session = self.get_session()
        try:
            if session.get(CardModel, card.id) is not None:
                raise DuplicateError(f"Card {card.id!r} already exists", card_id=card.id)
            session.add(CardModel(id=card.id, front=card.front, back=card.back, tags="\n".join(card.tags)))
            session.commit()
            return card
        finally:
            session.close()

    def get_card(self, card_id: str) -> Optional[Card]:
        session = self.get_session()
        try:
            row = session.get(CardModel, card_id)
            return _card_from_row(row) if row is not None else None
        finally:
            session.close()

    def get_cards(self, card_ids: Iterable[str]) -> dict[str, Card]:
        ids = list(card_ids)
        if not ids:
            return {}

        session = self.get_session()
        try:
            rows = session.query(CardModel).filter(CardModel.id.in_(ids)).all()
            return {row.id: _card_from_row(row) for row in rows}
        finally:
            session.close()
