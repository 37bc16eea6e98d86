"""
Record store abstraction for Postgres and an in-memory test implementation.

Both clients expose the same small table API the site needs: equality
filters, a single order column and an optional limit. Table and column names
are validated against the SQLAlchemy models at the bottom of this module.
"""

from __future__ import annotations

import copy
import time
from contextlib import contextmanager
from typing import Any, Dict, Iterator, Optional, Protocol

from sqlalchemy import JSON, Column, Float, Integer, String, Text, create_engine, inspect, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker


class DbError(Exception):
    """Raised when the record store rejects a call."""


class UnknownTableError(DbError):
    pass


class UnknownFieldError(DbError):
    pass


class DbClient(Protocol):
    """Interface for record store access."""

    def select(
        self,
        table: str,
        *,
        filters: Optional[dict] = None,
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
    ) -> list[dict]:
        ...

    def get(self, table: str, key: Any) -> Optional[dict]:
        ...

    def insert(self, table: str, record: dict) -> dict:
        ...

    def update(self, table: str, key: Any, changes: dict) -> Optional[dict]:
        ...

    def upsert(self, table: str, record: dict) -> dict:
        ...

    def delete(self, table: str, key: Any) -> bool:
        ...


def _model_for(table: str) -> type:
    model = TABLES.get(table)
    if model is None:
        raise UnknownTableError(f"Unknown table: {table}")
    return model


def _column_names(model: type) -> list[str]:
    return [column.key for column in model.__table__.columns]


def _primary_key(model: type) -> str:
    return inspect(model).primary_key[0].key


def _check_fields(model: type, record: dict) -> None:
    unknown = sorted(set(record) - set(_column_names(model)))
    if unknown:
        raise UnknownFieldError(
            f"Unknown field(s) for {model.__tablename__}: {', '.join(unknown)}"
        )


def _defaults(model: type) -> dict:
    values: dict = {}
    for column in model.__table__.columns:
        default = column.default
        if default is None:
            values[column.key] = None
        elif default.is_callable:
            values[column.key] = default.arg(None)
        else:
            values[column.key] = default.arg
    return values


def _row_to_dict(row: Any) -> dict:
    return {key: getattr(row, key) for key in _column_names(type(row))}


class InMemoryDbClient:
    """Simple in-memory record store for development and tests."""

    def __init__(self):
        self.tables: Dict[str, Dict[Any, dict]] = {name: {} for name in TABLES}

    def reset(self) -> None:
        """Clear all stored data (useful in tests)."""
        for rows in self.tables.values():
            rows.clear()

    def _rows(self, table: str) -> Dict[Any, dict]:
        _model_for(table)
        return self.tables[table]

    def _next_id(self, table: str) -> int:
        keys = [key for key in self.tables[table] if isinstance(key, int)]
        return max(keys, default=0) + 1

    def select(
        self,
        table: str,
        *,
        filters: Optional[dict] = None,
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
    ) -> list[dict]:
        model = _model_for(table)
        _check_fields(model, dict.fromkeys(filters or {}))
        rows = [
            row
            for row in self._rows(table).values()
            if all(row.get(name) == value for name, value in (filters or {}).items())
        ]
        if order_by:
            _check_fields(model, {order_by: None})
            rows = sorted(
                rows,
                key=lambda row: (row.get(order_by) is None, row.get(order_by)),
                reverse=descending,
            )
        if limit is not None:
            rows = rows[:limit]
        return copy.deepcopy(rows)

    def get(self, table: str, key: Any) -> Optional[dict]:
        row = self._rows(table).get(key)
        return copy.deepcopy(row) if row is not None else None

    def insert(self, table: str, record: dict) -> dict:
        model = _model_for(table)
        _check_fields(model, record)
        pk = _primary_key(model)
        stored = _defaults(model)
        stored.update({k: v for k, v in record.items() if v is not None or k == pk})
        if stored.get(pk) is None:
            if not isinstance(model.__table__.columns[pk].type, Integer):
                raise DbError(f"{table}.{pk} is required")
            stored[pk] = self._next_id(table)
        if stored[pk] in self.tables[table]:
            raise DbError(f"Duplicate key for {table}: {stored[pk]}")
        self.tables[table][stored[pk]] = copy.deepcopy(stored)
        return copy.deepcopy(stored)

    def update(self, table: str, key: Any, changes: dict) -> Optional[dict]:
        model = _model_for(table)
        _check_fields(model, changes)
        row = self.tables[table].get(key)
        if row is None:
            return None
        row.update(copy.deepcopy(changes))
        return copy.deepcopy(row)

    def upsert(self, table: str, record: dict) -> dict:
        model = _model_for(table)
        key = record.get(_primary_key(model))
        if key is not None and key in self.tables[table]:
            return self.update(table, key, record)
        return self.insert(table, record)

    def delete(self, table: str, key: Any) -> bool:
        return self._rows(table).pop(key, None) is not None


class PostgresDbClient:
    """
    SQLAlchemy-backed implementation. Accepts any SQLAlchemy URL (e.g., Postgres or SQLite for tests).
    """

    def __init__(self, database_url: str):
        if not database_url:
            raise ValueError("DATABASE_URL is required for PostgresDbClient")
        self.engine = create_engine(
            database_url,
            future=True,
            pool_pre_ping=True,
            pool_recycle=1800,
        )
        self.Session = sessionmaker(
            bind=self.engine, class_=Session, expire_on_commit=False, future=True
        )
        Base.metadata.create_all(self.engine)

    @contextmanager
    def _session(self) -> Iterator[Session]:
        with self.Session() as session:
            try:
                yield session
            except SQLAlchemyError as exc:
                session.rollback()
                raise DbError(str(exc)) from exc

    def select(
        self,
        table: str,
        *,
        filters: Optional[dict] = None,
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
    ) -> list[dict]:
        model = _model_for(table)
        _check_fields(model, dict.fromkeys(filters or {}))
        stmt = select(model)
        for name, value in (filters or {}).items():
            stmt = stmt.where(getattr(model, name) == value)
        if order_by:
            _check_fields(model, {order_by: None})
            column = getattr(model, order_by)
            stmt = stmt.order_by(column.desc() if descending else column.asc())
        if limit is not None:
            stmt = stmt.limit(limit)
        with self._session() as session:
            rows = session.execute(stmt).scalars().all()
            return [_row_to_dict(row) for row in rows]

    def get(self, table: str, key: Any) -> Optional[dict]:
        model = _model_for(table)
        with self._session() as session:
            row = session.get(model, key)
            return _row_to_dict(row) if row else None

    def insert(self, table: str, record: dict) -> dict:
        model = _model_for(table)
        _check_fields(model, record)
        values = {k: v for k, v in record.items() if v is not None}
        with self._session() as session:
            row = model(**values)
            session.add(row)
            session.commit()
            session.refresh(row)
            return _row_to_dict(row)

    def update(self, table: str, key: Any, changes: dict) -> Optional[dict]:
        model = _model_for(table)
        _check_fields(model, changes)
        with self._session() as session:
            row = session.get(model, key)
            if not row:
                return None
            for name, value in changes.items():
                setattr(row, name, value)
            session.commit()
            session.refresh(row)
            return _row_to_dict(row)

    def upsert(self, table: str, record: dict) -> dict:
        model = _model_for(table)
        key = record.get(_primary_key(model))
        if key is not None and self.get(table, key) is not None:
            return self.update(table, key, record)
        return self.insert(table, record)

    def delete(self, table: str, key: Any) -> bool:
        model = _model_for(table)
        with self._session() as session:
            row = session.get(model, key)
            if not row:
                return False
            session.delete(row)
            session.commit()
            return True


Base = declarative_base()


class SiteSettingsRow(Base):
    __tablename__ = "site_settings"

    id = Column(Integer, primary_key=True)
    brand_name = Column(String, nullable=True)
    tagline = Column(String, nullable=True)
    logo_url = Column(String, nullable=True)
    hero_title = Column(String, nullable=True)
    hero_subtitle = Column(Text, nullable=True)
    hero_image_url = Column(String, nullable=True)
    section2_badge = Column(String, nullable=True)
    section2_title = Column(String, nullable=True)
    section2_subtitle = Column(Text, nullable=True)
    section2_image_url = Column(String, nullable=True)
    whatsapp_number = Column(String, nullable=True)
    phone_number = Column(String, nullable=True)
    address_text = Column(String, nullable=True)
    email_address = Column(String, nullable=True)
    meta_description = Column(Text, nullable=True)
    meta_keywords = Column(String, nullable=True)
    airbnb_url = Column(String, nullable=True)
    booking_url = Column(String, nullable=True)
    updated_at = Column(Float, nullable=True)


class StayEnquiryRow(Base):
    __tablename__ = "stay_enquiries"

    id = Column(Integer, primary_key=True, autoincrement=True)
    created_at = Column(Float, nullable=False, default=time.time)
    name = Column(String, nullable=False)
    phone = Column(String, nullable=False)
    checkin = Column(String, nullable=False)
    checkout = Column(String, nullable=False)
    guests = Column(Integer, nullable=False, default=1)
    message = Column(Text, nullable=False, default="")
    source = Column(String, nullable=False, default="direct")
    status = Column(String, nullable=False, default="new", index=True)


class EventEnquiryRow(Base):
    __tablename__ = "event_enquiries"

    id = Column(Integer, primary_key=True, autoincrement=True)
    created_at = Column(Float, nullable=False, default=time.time)
    name = Column(String, nullable=False)
    phone = Column(String, nullable=False)
    event_date = Column(String, nullable=False)
    event_type = Column(String, nullable=False, default="Other")
    guests = Column(Integer, nullable=False, default=20)
    requirements = Column(Text, nullable=False, default="")
    source = Column(String, nullable=False, default="direct")
    status = Column(String, nullable=False, default="new", index=True)


class GuestTestimonialRow(Base):
    __tablename__ = "testimonials"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String, nullable=False)
    context = Column(String, nullable=False, default="")
    rating = Column(Integer, nullable=False, default=5)
    text = Column(Text, nullable=False)
    image = Column(String, nullable=True)


class FaqRow(Base):
    __tablename__ = "faqs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    question = Column(String, nullable=False)
    answer = Column(Text, nullable=False)


class AmenityGroupRow(Base):
    __tablename__ = "amenity_groups"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String, nullable=False)
    items = Column(JSON, nullable=False, default=list)


class EventSpaceRow(Base):
    __tablename__ = "event_spaces"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String, nullable=False)
    capacity = Column(String, nullable=False, default="")
    description = Column(Text, nullable=False, default="")


class HouseRuleRow(Base):
    __tablename__ = "house_rules"

    id = Column(Integer, primary_key=True, autoincrement=True)
    sort_order = Column(Integer, nullable=False, default=1)
    rule_text = Column(Text, nullable=False)


class GalleryImageRow(Base):
    __tablename__ = "gallery_images"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String, nullable=False)
    category = Column(String, nullable=False, index=True)
    storage_path = Column(String, nullable=False)
    url = Column(String, nullable=False)
    sort_order = Column(Integer, nullable=False, default=0)
    created_at = Column(Float, nullable=False, default=time.time)


class AdminUserRow(Base):
    __tablename__ = "admin_users"

    email = Column(String, primary_key=True)
    created_at = Column(Float, nullable=False, default=time.time)


TABLES: Dict[str, type] = {
    model.__tablename__: model
    for model in (
        SiteSettingsRow,
        StayEnquiryRow,
        EventEnquiryRow,
        GuestTestimonialRow,
        FaqRow,
        AmenityGroupRow,
        EventSpaceRow,
        HouseRuleRow,
        GalleryImageRow,
        AdminUserRow,
    )
}
