"""
main.py
========
This is the FastAPI entry point for the Doctor Picker backend.
It:
 - Initializes the catalog database and seeds it if empty.
 - Loads cities, specialties and doctors into the reference store.
 - Serves the catalog as the default reference data source.
 - Exposes the appointment form engine over REST and WebSocket.
"""

import json
import logging
from typing import List
from fastapi import Depends, FastAPI, HTTPException, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware
from . import models
from .config import CORS_ORIGINS, LOG_LEVEL
from .db import catalog_session, get_db, init_db
from .form import (
    FormValidationError, apply_change, build_form_view, empty_selection, submit_selection,
)
from .models import Base, Collection
from .reference_api import load_reference_data
from .schemas import (
    City, CollectionStatus, Doctor, FieldChangeRequest, FormView, ReferenceStatusResponse,
    SelectionState, Specialty, SubmitResponse,
)
from .seed import seed_catalog
from .store import ReferenceDataStore
from .synchronizer import synchronize_doctor_selection

logging.basicConfig(level=LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# APP INITIALIZATION
# ---------------------------------------------------------------------------

app = FastAPI(title="Doctor Picker Backend", version="1.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Global reference store instance
store = ReferenceDataStore()


def reference_status() -> ReferenceStatusResponse:
    def status(collection: Collection) -> CollectionStatus:
        failure = store.failure(collection)
        return CollectionStatus(
            count=len(getattr(store, collection.value)),
            error=failure.detail if failure else None,
        )

    return ReferenceStatusResponse(
        cities=status(Collection.cities),
        specialties=status(Collection.specialties),
        doctors=status(Collection.doctors),
    )


# ---------------------------------------------------------------------------
# APP STARTUP EVENT
# ---------------------------------------------------------------------------
@app.on_event("startup")
async def startup_event():
    """
    Called when FastAPI starts.
    Initializes the catalog, seeds it, and loads the reference store.
    """
    logger.info("🚀 Starting Doctor Picker Backend...")
    init_db(Base)

    with catalog_session() as db:
        seed_catalog(db)

    await load_reference_data(store)


# ---------------------------------------------------------------------------
# CATALOG ENDPOINTS
# ---------------------------------------------------------------------------

@app.get("/api/cities", response_model=List[City])
def api_cities(db=Depends(get_db)):
    """All cities in the catalog."""
    return [City.model_validate(c) for c in db.query(models.City).order_by(models.City.id)]


@app.get("/api/specialties", response_model=List[Specialty])
def api_specialties(db=Depends(get_db)):
    """All specialties in the catalog, with their sex restriction."""
    return [Specialty.model_validate(s) for s in db.query(models.Specialty).order_by(models.Specialty.id)]


@app.get("/api/doctors", response_model=List[Doctor])
def api_doctors(db=Depends(get_db)):
    """All doctors in the catalog."""
    return [Doctor.model_validate(d) for d in db.query(models.Doctor).order_by(models.Doctor.id)]


# ---------------------------------------------------------------------------
# REFERENCE STORE ENDPOINTS
# ---------------------------------------------------------------------------

@app.get("/api/reference/status", response_model=ReferenceStatusResponse)
async def api_reference_status():
    """How many records each collection holds and why any failed."""
    return reference_status()


@app.post("/api/reference/reload", response_model=ReferenceStatusResponse)
async def api_reference_reload():
    """Fetch all three collections again."""
    await load_reference_data(store)
    return reference_status()


# ---------------------------------------------------------------------------
# FORM ENDPOINTS
# ---------------------------------------------------------------------------

@app.post("/api/form/view", response_model=FormView)
async def api_form_view(state: SelectionState):
    """
    Render the form for a selection snapshot:
    filtered selectors, field errors and the derived age.
    """
    return build_form_view(state, store)


@app.post("/api/form/change", response_model=FormView)
async def api_form_change(req: FieldChangeRequest):
    """
    Apply one field change and render the result.

    - Birthday input is reshaped to DD/MM/YYYY
    - Choosing a doctor fills in city and specialty
    - Unknown fields or invalid values return 400
    """
    try:
        next_state = apply_change(req.state, req.field, req.value, store)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return build_form_view(next_state, store, previous=req.state)


@app.post("/api/form/submit", response_model=SubmitResponse)
async def api_form_submit(state: SelectionState):
    """
    Submit a finished selection.
    Returns 422 with per-field messages when the form is invalid.
    """
    try:
        appointment = submit_selection(state)
    except FormValidationError as e:
        raise HTTPException(status_code=422, detail=e.errors)
    return SubmitResponse(
        message="Appointment request submitted",
        appointment=appointment,
        state=empty_selection(),
    )


# ---------------------------------------------------------------------------
# WEBSOCKET ENDPOINT
# ---------------------------------------------------------------------------

@app.websocket("/ws/form")
async def websocket_form(ws: WebSocket):
    """
    Live form session. The server keeps the selection for this connection.
    Messages:
      {"field": "...", "value": "..."}  apply one change
      {"action": "submit"}              submit and reset on success
      {"action": "reset"}               start over
    Every reply is a FormView; failures reply {"event": "error", ...}.
    """
    await ws.accept()
    state = empty_selection()
    seen_revision = store.doctors_revision
    await ws.send_json(build_form_view(state, store).model_dump(mode="json", by_alias=True))

    try:
        while True:
            try:
                message = json.loads(await ws.receive_text())
            except ValueError:
                await ws.send_json({"event": "error", "detail": "Message is not valid JSON"})
                continue

            # Doctors were reloaded since the last message
            if store.doctors_revision != seen_revision:
                seen_revision = store.doctors_revision
                state = synchronize_doctor_selection(state, store)

            action = message.get("action") if isinstance(message, dict) else None
            if action == "reset":
                state = empty_selection()
                await ws.send_json(build_form_view(state, store).model_dump(mode="json", by_alias=True))
                continue

            if action == "submit":
                try:
                    appointment = submit_selection(state)
                except FormValidationError as e:
                    await ws.send_json({"event": "error", "detail": e.errors})
                    continue
                state = empty_selection()
                reply = build_form_view(state, store).model_dump(mode="json", by_alias=True)
                reply["submitted"] = appointment.model_dump(mode="json")
                await ws.send_json(reply)
                continue

            try:
                if not isinstance(message, dict) or "field" not in message:
                    raise ValueError("Expected {\"field\": ..., \"value\": ...} or an action")
                previous = state
                state = apply_change(state, message["field"], message.get("value"), store)
            except ValueError as e:
                await ws.send_json({"event": "error", "detail": str(e)})
                continue

            view = build_form_view(state, store, previous=previous)
            await ws.send_json(view.model_dump(mode="json", by_alias=True))
    except WebSocketDisconnect:
        logger.info("Form session disconnected.")


# ---------------------------------------------------------------------------
# ROOT ENDPOINT
# ---------------------------------------------------------------------------

@app.get("/")
def root():
    """Basic health check endpoint."""
    return {"message": "Doctor Picker Backend is running!"}
