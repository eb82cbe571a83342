from __future__ import annotations

import logging
import math
from functools import lru_cache
from typing import List, Optional

import numpy as np
import pandas as pd
from fastapi import FastAPI, Query, Request
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

from hrapi.schemas import (
    AnalysisFiltersModel,
    AssistantQuestionModel,
    CollaboratorDraftModel,
    IdsModel,
    ImportResponse,
    NewCollaboratorModel,
    RecordModel,
)
from hrcore.assistant import ask_assistant
from hrcore.config import load_settings
from hrcore.csv_io import export_collaborators_csv, export_records_csv
from hrcore.data import prepare_context
from hrcore.filters import DATE_RANGE_OPTIONS
from hrcore.listing import collaborator_name, filter_records, search_collaborators
from hrcore.metrics_dashboard import compute_dashboard
from hrcore.metrics_impact import compute_impact
from hrcore.models import (
    AbsenceReason,
    Collaborator,
    CollaboratorStatus,
    ContractType,
    HirePayload,
    HRRecord,
    RecordType,
    SanctionType,
    TerminationReason,
    enum_values,
    parse_details,
)
from hrcore.storage import open_store
from hrcore.store import DuplicateCollaboratorError, EntityStore, StoreError
from hrcore.validation import is_iso_date

app = FastAPI(title="HR Console API", version="0.1.0")
logger = logging.getLogger(__name__)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:3000", "http://127.0.0.1:3000"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@lru_cache(maxsize=1)
def get_store() -> EntityStore:
    return open_store(load_settings().data_dir)


def _json(data: object, status_code: int = 200) -> JSONResponse:
    """Return JSON with safe encoding for pandas/numpy objects."""

    def _safe_float(value: object) -> float | None:
        try:
            out = float(value)  # type: ignore[arg-type]
        except (TypeError, ValueError):
            return None
        if math.isnan(out) or math.isinf(out):
            return None
        return out

    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder(
            data,
            custom_encoder={
                type(pd.NA): lambda _: None,
                type(pd.NaT): lambda _: None,
                np.integer: int,
                float: _safe_float,
                np.floating: _safe_float,
                np.bool_: bool,
                np.ndarray: lambda arr: arr.tolist(),
                pd.Timestamp: lambda ts: ts.isoformat(),
            },
        ),
    )


def _failure(name: str, exc: Exception) -> JSONResponse:
    """Map an exception raised inside an endpoint to an error response."""
    body = {"error": str(exc), "type": type(exc).__name__}
    if isinstance(exc, LookupError):
        return JSONResponse(status_code=404, content=body)
    if isinstance(exc, DuplicateCollaboratorError):
        return JSONResponse(status_code=409, content=body)
    if isinstance(exc, (StoreError, ValueError)):
        return JSONResponse(status_code=400, content=body)
    logger.exception("%s failed", name)
    return JSONResponse(status_code=500, content=body)


def _collaborator_from_model(collaborator_id: str, model: CollaboratorDraftModel) -> Collaborator:
    if not is_iso_date(model.hire_date):
        raise ValueError(f"La fecha '{model.hire_date}' no es válida.")
    return Collaborator(
        id=collaborator_id,
        name=model.name,
        dni=model.dni,
        legajo=model.legajo,
        cuil=model.cuil,
        position=model.position,
        ug=model.ug,
        hire_date=model.hire_date,
        contract_type=model.contract_type,
        category=model.category,
        cct=model.cct,
        service=model.service,
        turn=model.turn,
        observations=model.observations,
    )


def _record_from_model(record_id: str, model: RecordModel) -> HRRecord:
    if not is_iso_date(model.date):
        raise ValueError(f"La fecha '{model.date}' no es válida.")
    return HRRecord(
        id=record_id,
        date=model.date,
        collaborator_id=model.collaborator_id,
        ug=model.ug,
        position=model.position,
        details=parse_details(model.type, model.details),
        cost=model.cost,
        observations=model.observations,
    )


def _status(value: Optional[str]) -> Optional[CollaboratorStatus]:
    if not value or value.lower() == "all":
        return None
    return CollaboratorStatus(value)


def _csv_response(text: str, filename: str) -> Response:
    return Response(
        content=text.encode("utf-8"),
        media_type="text/csv",
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )


# ---------------- Meta ----------------
@app.get("/meta/ugs")
def meta_ugs():
    try:
        ugs = sorted({c.ug for c in get_store().collaborators if c.ug})
        return _json({"ugs": ugs})
    except Exception as exc:
        return _failure("meta_ugs", exc)


@app.get("/meta/enums")
def meta_enums():
    return _json(
        {
            "statuses": enum_values(CollaboratorStatus),
            "contract_types": enum_values(ContractType),
            "record_types": enum_values(RecordType),
            "termination_reasons": enum_values(TerminationReason),
            "sanction_types": enum_values(SanctionType),
            "absence_reasons": enum_values(AbsenceReason),
            "date_ranges": DATE_RANGE_OPTIONS,
        }
    )


# ---------------- Collaborators ----------------
@app.get("/collaborators")
def list_collaborators(q: str = Query(default=""), status: Optional[str] = Query(default=None)):
    try:
        found = search_collaborators(get_store().collaborators, q, _status(status))
        return _json({"collaborators": [c.to_dict() for c in found]})
    except Exception as exc:
        return _failure("list_collaborators", exc)


@app.post("/collaborators")
def create_collaborator(payload: NewCollaboratorModel):
    try:
        store = get_store()
        hire = HirePayload(**payload.hire.model_dump())
        if hire.date and not is_iso_date(hire.date):
            raise ValueError(f"La fecha '{hire.date}' no es válida.")
        snap = store.add_collaborator(_collaborator_from_model("", payload.collaborator), hire)
        return _json(
            {"collaborator": snap.collaborators[-1].to_dict(), "record": snap.records[-1].to_dict()},
            status_code=201,
        )
    except Exception as exc:
        return _failure("create_collaborator", exc)


@app.put("/collaborators/{collaborator_id}")
def update_collaborator(collaborator_id: str, payload: CollaboratorDraftModel):
    try:
        store = get_store()
        store.edit_collaborator(_collaborator_from_model(collaborator_id, payload))
        return _json(store.get_collaborator(collaborator_id).to_dict())
    except Exception as exc:
        return _failure("update_collaborator", exc)


@app.delete("/collaborators")
def delete_collaborators(payload: IdsModel):
    try:
        store = get_store()
        before = (len(store.collaborators), len(store.records))
        snap = store.delete_collaborators(payload.ids)
        return _json(
            {
                "deleted_collaborators": before[0] - len(snap.collaborators),
                "deleted_records": before[1] - len(snap.records),
            }
        )
    except Exception as exc:
        return _failure("delete_collaborators", exc)


# ---------------- Records ----------------
@app.get("/records")
def list_records(
    type: Optional[List[RecordType]] = Query(default=None),
    collaborator_id: Optional[List[str]] = Query(default=None),
):
    try:
        store = get_store()
        found = filter_records(store.records, type, collaborator_id)
        rows = [
            {**r.to_dict(), "collaboratorName": collaborator_name(store.collaborators, r.collaborator_id)}
            for r in found
        ]
        return _json({"records": rows})
    except Exception as exc:
        return _failure("list_records", exc)


@app.post("/records")
def create_record(payload: RecordModel):
    try:
        snap = get_store().add_record(_record_from_model(payload.id, payload))
        return _json(snap.records[-1].to_dict(), status_code=201)
    except Exception as exc:
        return _failure("create_record", exc)


@app.put("/records/{record_id}")
def update_record(record_id: str, payload: RecordModel):
    try:
        store = get_store()
        store.edit_record(_record_from_model(record_id, payload))
        return _json(store.get_record(record_id).to_dict())
    except Exception as exc:
        return _failure("update_record", exc)


@app.delete("/records")
def delete_records(payload: IdsModel):
    try:
        store = get_store()
        before = len(store.records)
        snap = store.delete_records(payload.ids)
        return _json({"deleted_records": before - len(snap.records)})
    except Exception as exc:
        return _failure("delete_records", exc)


# ---------------- CSV import / export ----------------
@app.post("/import/collaborators", response_model=ImportResponse)
async def import_collaborators(request: Request):
    try:
        text = (await request.body()).decode("utf-8-sig")
        result = get_store().import_collaborators_csv(text)
        return _json(ImportResponse(imported=len(result.accepted), errors=result.errors))
    except Exception as exc:
        return _failure("import_collaborators", exc)


@app.post("/import/records", response_model=ImportResponse)
async def import_records(request: Request):
    try:
        text = (await request.body()).decode("utf-8-sig")
        result = get_store().import_records_csv(text)
        return _json(ImportResponse(imported=len(result.accepted), errors=result.errors))
    except Exception as exc:
        return _failure("import_records", exc)


@app.get("/export/collaborators")
def export_collaborators(
    ids: Optional[List[str]] = Query(default=None),
    q: str = Query(default=""),
    status: Optional[str] = Query(default=None),
):
    try:
        collaborators = get_store().collaborators
        # Explicit ids select from the whole roster and override the filters.
        selected = collaborators if ids else search_collaborators(collaborators, q, _status(status))
        return _csv_response(export_collaborators_csv(selected, ids or None), "colaboradores.csv")
    except Exception as exc:
        return _failure("export_collaborators", exc)


@app.get("/export/records")
def export_records(
    ids: Optional[List[str]] = Query(default=None),
    type: Optional[List[RecordType]] = Query(default=None),
    collaborator_id: Optional[List[str]] = Query(default=None),
):
    try:
        records = get_store().records
        selected = records if ids else filter_records(records, type, collaborator_id)
        return _csv_response(export_records_csv(selected, ids or None), "registros.csv")
    except Exception as exc:
        return _failure("export_records", exc)


# ---------------- Analytics ----------------
@app.post("/dashboard")
def dashboard(filters: AnalysisFiltersModel):
    try:
        ctx = prepare_context(filters.model_dump(), get_store().snapshot)
        return _json(compute_dashboard(ctx["filters"], ctx))
    except Exception as exc:
        return _failure("dashboard", exc)


@app.post("/impact")
def impact(filters: AnalysisFiltersModel):
    try:
        ctx = prepare_context(filters.model_dump(), get_store().snapshot)
        return _json(compute_impact(ctx["filters"], ctx))
    except Exception as exc:
        return _failure("impact", exc)


@app.post("/assistant")
def assistant(payload: AssistantQuestionModel):
    answer = ask_assistant(payload.question, get_store().snapshot)
    return _json({"answer": answer})
