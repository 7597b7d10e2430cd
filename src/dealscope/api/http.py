# src/dealscope/api/http.py
from __future__ import annotations

import shutil
import tempfile
from dataclasses import asdict
from pathlib import Path
from typing import Any, Literal

from fastapi import Depends, FastAPI, File, HTTPException, Query, Request, UploadFile
from fastapi.responses import FileResponse
from pydantic import ValidationError
from starlette.background import BackgroundTask

from dealscope.adapters.config import config
from dealscope.adapters.logging_utils import get_logger
from dealscope.adapters.sql_repo import (
    DuplicateLeadError,
    SqlDealRepository,
    SqlInvestorLeadRepository,
    SqlPropertyRepository,
)
from dealscope.services.deal_analyzer import EXAMPLE_DEAL, analyze_deal
from dealscope.services.export import default_export_name, export_properties
from dealscope.services.importer import auto_map_columns, import_rows, read_upload
from dealscope.services.investors import QualificationForm, project_investment, submit_qualification
from dealscope.services.portfolio import (
    PropertyFilters,
    active_filter_count,
    apply_filters,
    county_distribution,
    deal_pipeline,
    filter_options,
    portfolio_summary,
)

from .schemas import (
    AnalyzeRequest,
    AnalyzeResponse,
    CalculatorRequest,
    ImportResponse,
    PropertyListResponse,
    QualificationResponse,
    SavedDealItem,
)

logger = get_logger(__name__)

_REQUEST_ONLY_FIELDS = {"save", "ai_insights"}


def _deal_repo(request: Request) -> SqlDealRepository:
    return request.app.state.deal_repo


def _property_repo(request: Request) -> SqlPropertyRepository:
    return request.app.state.property_repo


def _lead_repo(request: Request) -> SqlInvestorLeadRepository:
    return request.app.state.lead_repo


def create_app(db_uri: str | None = None) -> FastAPI:
    app = FastAPI(title="dealscope")

    uri = db_uri or config.DB_URI
    app.state.deal_repo = SqlDealRepository(uri)
    app.state.property_repo = SqlPropertyRepository(uri)
    app.state.lead_repo = SqlInvestorLeadRepository(uri)

    # -----------------------------
    # Deal underwriting
    # -----------------------------
    @app.get("/deals/example")
    def get_example_deal() -> dict[str, Any]:
        return dict(EXAMPLE_DEAL)

    @app.post("/analyze", response_model=AnalyzeResponse)
    def analyze_endpoint(
        payload: AnalyzeRequest,
        repo: SqlDealRepository = Depends(_deal_repo),
    ) -> AnalyzeResponse:
        raw = payload.model_dump(exclude_unset=True, exclude=_REQUEST_ONLY_FIELDS)
        try:
            result = analyze_deal(raw_payload=raw, repo=None, save=False)
        except (ValueError, ValidationError) as e:
            raise HTTPException(status_code=400, detail=str(e)) from e

        if payload.save:
            try:
                result["deal_id"] = repo.save_analysis(result, raw, ai_insights=payload.ai_insights)
            except Exception as e:
                logger.warning("save_analysis_failed", extra={"context": {"error": str(e)}})

        return AnalyzeResponse(**result)

    @app.get("/deals", response_model=list[SavedDealItem])
    def list_deals(
        limit: int = Query(config.DEALS_DEFAULT_LIMIT, ge=1, le=500),
        repo: SqlDealRepository = Depends(_deal_repo),
    ) -> list[SavedDealItem]:
        return [SavedDealItem.model_validate(r) for r in repo.list_recent(limit=limit)]

    @app.get("/deals/{deal_id}")
    def get_deal(deal_id: int, repo: SqlDealRepository = Depends(_deal_repo)) -> dict[str, Any]:
        row = repo.get(deal_id)
        if row is None:
            raise HTTPException(status_code=404, detail="deal not found")
        return row.result | {"deal_id": row.id, "ai_insights": row.ai_insights}

    @app.delete("/deals/{deal_id}")
    def delete_deal(deal_id: int, repo: SqlDealRepository = Depends(_deal_repo)) -> dict[str, Any]:
        if not repo.delete(deal_id):
            raise HTTPException(status_code=404, detail="deal not found")
        return {"deleted": deal_id}

    # -----------------------------
    # Portfolio
    # -----------------------------
    @app.get("/properties", response_model=PropertyListResponse)
    def list_properties(
        city: str = "all",
        property_type: str = "all",
        occupancy_status: str = "all",
        deal_stage: str = "all",
        min_price: float = 0.0,
        max_price: float = 1_000_000.0,
        min_roi: float = 0.0,
        max_roi: float = 100.0,
        q: str = "",
        repo: SqlPropertyRepository = Depends(_property_repo),
    ) -> PropertyListResponse:
        try:
            filters = PropertyFilters(
                city=city,
                property_type=property_type,
                occupancy_status=occupancy_status,
                deal_stage=deal_stage,
                price_range=(min_price, max_price),
                roi_range=(min_roi, max_roi),
                search=q,
            )
        except ValidationError as e:
            raise HTTPException(status_code=400, detail=str(e)) from e

        records = repo.list_active()
        items = apply_filters(records, filters)
        return PropertyListResponse(
            total=len(records),
            count=len(items),
            active_filters=active_filter_count(filters, filter_options(records)["max_price"]),
            items=items,
        )

    @app.get("/properties/filters")
    def get_filter_options(repo: SqlPropertyRepository = Depends(_property_repo)) -> dict[str, Any]:
        return filter_options(repo.list_active())

    @app.get("/properties/{property_id}")
    def get_property(property_id: str, repo: SqlPropertyRepository = Depends(_property_repo)) -> dict[str, Any]:
        rec = repo.get(property_id)
        if rec is None:
            raise HTTPException(status_code=404, detail="property not found")
        return rec

    @app.post("/properties/import", response_model=ImportResponse)
    def import_properties(
        file: UploadFile = File(...),
        repo: SqlPropertyRepository = Depends(_property_repo),
    ) -> ImportResponse:
        suffix = Path(file.filename or "upload.csv").suffix or ".csv"
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / f"upload{suffix}"
            path.write_bytes(file.file.read())
            try:
                headers, rows = read_upload(path)
            except ValueError as e:
                raise HTTPException(status_code=400, detail=str(e)) from e

        mappings = auto_map_columns(headers)
        result = import_rows(rows, mappings, repo)
        return ImportResponse(
            success=result.success,
            failed=result.failed,
            errors=result.errors,
            mappings=mappings,
        )

    @app.get("/properties/export/{fmt}")
    def export_endpoint(
        fmt: Literal["csv", "xlsx"],
        repo: SqlPropertyRepository = Depends(_property_repo),
    ) -> FileResponse:
        out_dir = Path(tempfile.mkdtemp(prefix="dealscope-export-"))
        path = export_properties(repo.list_active(), out_dir, fmt=fmt)
        if path is None:
            shutil.rmtree(out_dir, ignore_errors=True)
            raise HTTPException(status_code=404, detail="no properties to export")
        return FileResponse(
            path,
            filename=f"{default_export_name()}.{fmt}",
            background=BackgroundTask(shutil.rmtree, out_dir, ignore_errors=True),
        )

    @app.get("/portfolio/summary")
    def get_portfolio_summary(repo: SqlPropertyRepository = Depends(_property_repo)) -> dict[str, Any]:
        records = repo.list_active()
        return {
            "summary": portfolio_summary(records),
            "pipeline": deal_pipeline(records),
            "counties": county_distribution(records),
        }

    # -----------------------------
    # Investor funnel
    # -----------------------------
    @app.post("/investors/qualify", response_model=QualificationResponse)
    def qualify_endpoint(
        form: QualificationForm,
        repo: SqlInvestorLeadRepository = Depends(_lead_repo),
    ) -> QualificationResponse:
        try:
            return QualificationResponse(**submit_qualification(form, repo))
        except DuplicateLeadError as e:
            raise HTTPException(status_code=409, detail=str(e)) from e

    @app.post("/investors/calculator")
    def calculator_endpoint(body: CalculatorRequest) -> dict[str, Any]:
        try:
            projection = project_investment(
                body.amount,
                body.hold_months,
                body.tier,
                body.expected_appreciation_pct,
            )
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e)) from e
        return asdict(projection)

    return app


app = create_app()
