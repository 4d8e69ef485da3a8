# src/brrrr/adapters/sql_repo.py
from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from sqlalchemy import DateTime
from sqlmodel import JSON, Column, Field, Session, SQLModel, create_engine, select

from brrrr.domain.ports import SavedDeal


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(dt: datetime) -> datetime:
    # SQLite hands timestamps back without tzinfo; they were written as UTC
    return dt.replace(tzinfo=timezone.utc) if dt.tzinfo is None else dt.astimezone(timezone.utc)


class DealRow(SQLModel, table=True):
    __tablename__ = "brrrr_deals"

    id: int | None = Field(default=None, primary_key=True)
    created_at: datetime = Field(
        default_factory=_utcnow,
        sa_column=Column(DateTime(timezone=True), nullable=False, index=True),
    )
    updated_at: datetime = Field(
        default_factory=_utcnow,
        sa_column=Column(DateTime(timezone=True), nullable=False, index=True),
    )

    deal_name: str = Field(index=True)
    notes: str | None = None

    inputs: dict[str, Any] = Field(sa_column=Column(JSON))
    results: dict[str, Any] = Field(sa_column=Column(JSON))

    def to_saved_deal(self) -> SavedDeal:
        return SavedDeal(
            id=int(self.id),  # type: ignore[arg-type]
            deal_name=self.deal_name,
            inputs=dict(self.inputs or {}),
            results=dict(self.results or {}),
            notes=self.notes,
            created_at=_as_utc(self.created_at),
            updated_at=_as_utc(self.updated_at),
        )


class SqlDealRepository:
    def __init__(self, uri: str = "sqlite:///brrrr.db"):
        connect_args = {"check_same_thread": False} if uri.startswith("sqlite") else {}
        self.engine = create_engine(uri, echo=False, connect_args=connect_args)
        SQLModel.metadata.create_all(self.engine)

    def create(
        self,
        deal_name: str,
        inputs: dict[str, Any],
        results: dict[str, Any],
        notes: str | None = None,
    ) -> int:
        row = DealRow(deal_name=deal_name, inputs=inputs, results=results, notes=notes)
        with Session(self.engine) as session:
            session.add(row)
            session.commit()
            session.refresh(row)
            return int(row.id)  # type: ignore[arg-type]

    def update(
        self,
        deal_id: int,
        deal_name: str,
        inputs: dict[str, Any],
        results: dict[str, Any],
        notes: str | None = None,
    ) -> bool:
        with Session(self.engine) as session:
            row = session.get(DealRow, deal_id)
            if row is None:
                return False
            row.deal_name = deal_name
            row.inputs = inputs
            row.results = results
            row.notes = notes
            row.updated_at = _utcnow()
            session.add(row)
            session.commit()
            return True

    def update_notes(self, deal_id: int, notes: str) -> bool:
        with Session(self.engine) as session:
            row = session.get(DealRow, deal_id)
            if row is None:
                return False
            row.notes = notes
            row.updated_at = _utcnow()
            session.add(row)
            session.commit()
            return True

    def delete(self, deal_id: int) -> bool:
        with Session(self.engine) as session:
            row = session.get(DealRow, deal_id)
            if row is None:
                return False
            session.delete(row)
            session.commit()
            return True

    def get(self, deal_id: int) -> SavedDeal | None:
        with Session(self.engine) as session:
            row = session.get(DealRow, deal_id)
            return row.to_saved_deal() if row else None

    def list_recent(self, limit: int = 50) -> list[SavedDeal]:
        with Session(self.engine) as session:
            stmt = (
                select(DealRow)
                .order_by(DealRow.created_at.desc(), DealRow.id.desc())  # type: ignore[union-attr]
                .limit(limit)
            )
            return [r.to_saved_deal() for r in session.exec(stmt)]
