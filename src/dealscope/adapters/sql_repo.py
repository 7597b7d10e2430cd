# src/dealscope/adapters/sql_repo.py
from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Iterable

from sqlmodel import JSON, Column, Field, Session, SQLModel, create_engine, select


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ---------- Saved deal analyses ----------

class SavedDealRow(SQLModel, table=True):
    __tablename__ = "saved_deals"

    id: int | None = Field(default=None, primary_key=True)
    created_at: datetime = Field(default_factory=_utcnow, index=True)
    user_id: str | None = Field(default=None, index=True)

    address: str
    property_type: str
    units: int
    bpo_value: float
    strike_price: float
    rehab_costs: float
    hold_period: int
    exit_strategy: str
    sale_price: float
    latitude: float | None = None
    longitude: float | None = None

    roi: float | None = None
    irr: float | None = None
    profit: float | None = None
    verdict: str | None = Field(default=None, index=True)
    ai_insights: str | None = None

    payload: dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON))
    result: dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON))


class SqlDealRepository:
    def __init__(self, uri: str = "sqlite:///dealscope.db"):
        self.engine = create_engine(uri, echo=False)
        SQLModel.metadata.create_all(self.engine)

    def save_analysis(
        self,
        analysis: dict[str, Any],
        request_payload: dict[str, Any],
        *,
        user_id: str | None = None,
        ai_insights: str | None = None,
    ) -> int:
        deal = analysis.get("deal", {})
        metrics = analysis.get("metrics", {})
        row = SavedDealRow(
            user_id=user_id,
            address=deal.get("address", ""),
            property_type=deal.get("propertyType", ""),
            units=int(deal.get("units", 1)),
            bpo_value=float(deal.get("bpoValue", 0.0)),
            strike_price=float(deal.get("strikePrice", 0.0)),
            rehab_costs=float(deal.get("rehabCosts", 0.0)),
            hold_period=int(deal.get("holdPeriod", 0)),
            exit_strategy=deal.get("exitStrategy", ""),
            sale_price=float(deal.get("salePrice", 0.0)),
            latitude=deal.get("latitude"),
            longitude=deal.get("longitude"),
            roi=metrics.get("roi"),
            irr=metrics.get("irr"),
            profit=metrics.get("profit"),
            verdict=analysis.get("verdict"),
            ai_insights=ai_insights,
            payload=request_payload,
            result=analysis,
        )
        with Session(self.engine) as session:
            session.add(row)
            session.commit()
            session.refresh(row)
            return int(row.id)  # type: ignore[arg-type]

    def get(self, deal_id: int) -> SavedDealRow | None:
        with Session(self.engine) as session:
            return session.get(SavedDealRow, deal_id)

    def list_recent(self, limit: int = 50) -> list[SavedDealRow]:
        with Session(self.engine) as session:
            stmt = (
                select(SavedDealRow)
                .order_by(SavedDealRow.created_at.desc(), SavedDealRow.id.desc())
                .limit(limit)
            )
            return list(session.exec(stmt))

    def delete(self, deal_id: int) -> bool:
        with Session(self.engine) as session:
            row = session.get(SavedDealRow, deal_id)
            if row is None:
                return False
            session.delete(row)
            session.commit()
            return True


# ---------- Portfolio properties ----------

class PropertyRow(SQLModel, table=True):
    __tablename__ = "properties"

    id: int | None = Field(default=None, primary_key=True)
    created_at: datetime = Field(default_factory=_utcnow, index=True)
    updated_at: datetime = Field(default_factory=_utcnow)
    created_by: str | None = None

    property_id: str = Field(index=True, unique=True)
    source: str = Field(default="Data Import", index=True)
    source_loan_number: str | None = None
    deal_stage: str = Field(default="Active", index=True)
    is_active: bool = Field(default=True, index=True)

    address: str
    city: str = Field(index=True)
    state: str
    zip_code: str = Field(index=True)
    county: str | None = Field(default=None, index=True)
    latitude: float | None = None
    longitude: float | None = None

    property_type: str | None = Field(default=None, index=True)
    zoning: str | None = None
    num_units: int | None = None
    bedrooms: int | None = None
    bathrooms: float | None = None
    square_feet: int | None = None
    lot_size: int | None = None
    year_built: int | None = None
    occupancy_status: str | None = None
    owner_occupied: bool | None = None

    bpo: float | None = None
    arv: float | None = None
    upb: float | None = None
    total_balance: float | None = None
    current_interest_rate: float | None = None
    strike_price: float | None = Field(default=None, index=True)
    ltv_ratio: float | None = None

    delinquent_status: str | None = None
    foreclosure_flag: bool | None = None
    foreclosure_status: str | None = None
    bankruptcy_flag: bool | None = None

    estimated_roi: float | None = None
    estimated_irr: float | None = None
    projected_hold_period_months: int | None = None
    risk_score: int | None = None

    owner_first_name: str | None = None
    owner_last_name: str | None = None
    notes: str | None = None

    # any imported column without a dedicated field
    extra: dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON))


_PROPERTY_META_FIELDS = {"id", "created_at", "updated_at", "extra"}
PROPERTY_FIELDS: tuple[str, ...] = tuple(
    f for f in PropertyRow.model_fields if f not in _PROPERTY_META_FIELDS
)


def _property_to_record(row: PropertyRow) -> dict[str, Any]:
    rec = dict(row.extra or {})
    rec.update(row.model_dump(exclude={"extra"}))
    return rec


class SqlPropertyRepository:
    def __init__(self, uri: str = "sqlite:///dealscope.db"):
        self.engine = create_engine(uri, echo=False)
        SQLModel.metadata.create_all(self.engine)

    def upsert_many(self, items: Iterable[dict[str, Any]]) -> int:
        """Insert or update on property_id. All-or-nothing per call."""
        written = 0
        with Session(self.engine) as session:
            for item in items:
                if not item:
                    continue

                property_id = str(item.get("property_id") or "").strip()
                if not property_id:
                    raise ValueError("property_id is required for upsert")

                known = {k: v for k, v in item.items() if k in PROPERTY_FIELDS}
                known["property_id"] = property_id
                extra = {k: v for k, v in item.items() if k not in PROPERTY_FIELDS and k not in _PROPERTY_META_FIELDS}

                stmt = select(PropertyRow).where(PropertyRow.property_id == property_id)
                row = session.exec(stmt).first()

                if row:
                    for field, value in known.items():
                        setattr(row, field, value)
                    if extra:
                        row.extra = {**(row.extra or {}), **extra}
                    row.updated_at = _utcnow()
                else:
                    row = PropertyRow.model_validate({**known, "extra": extra})
                    session.add(row)

                written += 1
            session.commit()
        return written

    def get(self, property_id: str) -> dict[str, Any] | None:
        with Session(self.engine) as session:
            stmt = select(PropertyRow).where(PropertyRow.property_id == property_id)
            row = session.exec(stmt).first()
            return _property_to_record(row) if row else None

    def list_active(self, limit: int | None = None) -> list[dict[str, Any]]:
        with Session(self.engine) as session:
            stmt = (
                select(PropertyRow)
                .where(PropertyRow.is_active == True)  # noqa: E712
                .order_by(PropertyRow.created_at.desc(), PropertyRow.id.desc())
            )
            if limit is not None:
                stmt = stmt.limit(limit)
            rows = list(session.exec(stmt))
        return [_property_to_record(r) for r in rows]


# ---------- Investor leads ----------

class DuplicateLeadError(ValueError):
    pass


class InvestorLeadRow(SQLModel, table=True):
    __tablename__ = "investor_leads"

    id: int | None = Field(default=None, primary_key=True)
    created_at: datetime = Field(default_factory=_utcnow, index=True)

    name: str
    email: str = Field(index=True, unique=True)
    phone: str | None = None

    investment_tier: str | None = None
    accredited_status: str | None = None
    experience: str | None = None
    investment_amount: float | None = None
    timeline: str | None = None

    qualified: bool = Field(default=False, index=True)
    source: str = Field(default="portal")
    status: str = Field(default="new", index=True)
    notes: str | None = None


class SqlInvestorLeadRepository:
    def __init__(self, uri: str = "sqlite:///dealscope.db"):
        self.engine = create_engine(uri, echo=False)
        SQLModel.metadata.create_all(self.engine)

    def add(self, lead: dict[str, Any]) -> int:
        email = str(lead.get("email") or "").strip().lower()
        with Session(self.engine) as session:
            existing = session.exec(select(InvestorLeadRow).where(InvestorLeadRow.email == email)).first()
            if existing:
                raise DuplicateLeadError("This email is already registered.")

            row = InvestorLeadRow.model_validate({**lead, "email": email})
            session.add(row)
            session.commit()
            session.refresh(row)
            return int(row.id)  # type: ignore[arg-type]

    def list_leads(self, *, qualified: bool | None = None, limit: int = 200) -> list[InvestorLeadRow]:
        with Session(self.engine) as session:
            stmt = select(InvestorLeadRow)
            if qualified is not None:
                stmt = stmt.where(InvestorLeadRow.qualified == qualified)
            stmt = stmt.order_by(InvestorLeadRow.created_at.desc()).limit(limit)
            return list(session.exec(stmt))
