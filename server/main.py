"""
main.py — FastAPI application entry point.
KeyGenie BB84 simulator backend.

Provides REST APIs for:
  - Step-by-step sessions (create, advance, retreat, reset, report)
  - Quick runs that go straight to the QBER report
  - Health

Run with:
    keygenie-api                    # or: uvicorn server.main:app
"""
from __future__ import annotations

from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from keygenie import __version__, config
from keygenie.bb84 import SimulationSession
from keygenie.errors import ConfigurationError, SessionStateError
from keygenie.logging_config import configure_logging, get_logger
from keygenie.random_source import RandomSource

from .models import QberReportOut, ReportEnvelope, SessionCreate, SnapshotOut
from .session_store import SessionStore

log = get_logger("keygenie.api")


# ── Global state ─────────────────────────────────────────────────────── #

store = SessionStore(capacity=config.MAX_SESSIONS)


# ── Lifespan ─────────────────────────────────────────────────────────── #

@asynccontextmanager
async def lifespan(app: FastAPI):
    log.info("KeyGenie API %s ready", __version__)
    yield
    log.info("KeyGenie API shutting down with %d live sessions", len(store))

app = FastAPI(
    title="KeyGenie BB84 Simulator",
    description="Step-by-step and quick-run BB84 quantum key distribution simulation",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(ConfigurationError)
async def configuration_error_handler(request: Request, exc: ConfigurationError):
    log.warning("Rejected configuration on %s: %s", request.url.path, exc)
    return JSONResponse(status_code=400, content={"detail": str(exc)})


@app.exception_handler(SessionStateError)
async def session_state_error_handler(request: Request, exc: SessionStateError):
    return JSONResponse(status_code=409, content={"detail": str(exc)})


def _get_session(session_id: str) -> SimulationSession:
    session = store.get(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail=f"Session {session_id} not found")
    return session


# ===================================================================== #
#  SESSION ROUTES                                                         #
# ===================================================================== #

@app.post("/api/sessions", response_model=SnapshotOut)
async def create_session(body: SessionCreate):
    """Create a session and start it in step mode."""
    noise = config.percent_to_probability(body.noise_percent, "noise_percent")
    eavesdropping = config.percent_to_probability(body.eavesdropping_percent, "eavesdropping_percent")
    session_id, session = store.create(seed=body.seed)
    try:
        snapshot = session.start(body.qubit_count, noise, eavesdropping)
    except ConfigurationError:
        store.delete(session_id)
        raise
    log.info(
        "Session %s created: %d qubits, noise=%.0f%%, eavesdropping=%.0f%%",
        session_id, body.qubit_count, body.noise_percent, body.eavesdropping_percent,
    )
    return SnapshotOut.from_snapshot(session_id, snapshot)


@app.get("/api/sessions/{session_id}", response_model=SnapshotOut)
async def get_session(session_id: str):
    return SnapshotOut.from_snapshot(session_id, _get_session(session_id).snapshot())


@app.post("/api/sessions/{session_id}/advance", response_model=SnapshotOut)
async def advance_session(session_id: str):
    return SnapshotOut.from_snapshot(session_id, _get_session(session_id).advance())


@app.post("/api/sessions/{session_id}/retreat", response_model=SnapshotOut)
async def retreat_session(session_id: str):
    return SnapshotOut.from_snapshot(session_id, _get_session(session_id).retreat())


@app.post("/api/sessions/{session_id}/run", response_model=QberReportOut)
async def run_session(session_id: str):
    """Skip the remaining reveals and return the final report."""
    report = _get_session(session_id).run_to_completion()
    return QberReportOut.from_report(report)


@app.post("/api/sessions/{session_id}/reset", response_model=SnapshotOut)
async def reset_session(session_id: str):
    return SnapshotOut.from_snapshot(session_id, _get_session(session_id).reset())


@app.get("/api/sessions/{session_id}/report", response_model=ReportEnvelope)
async def get_report(session_id: str):
    report = _get_session(session_id).report
    if report is None:
        return ReportEnvelope(session_id=session_id, ready=False)
    return ReportEnvelope(session_id=session_id, ready=True, report=QberReportOut.from_report(report))


@app.delete("/api/sessions/{session_id}")
async def delete_session(session_id: str):
    if not store.delete(session_id):
        raise HTTPException(status_code=404, detail=f"Session {session_id} not found")
    return {"deleted": session_id}


@app.post("/api/quick-run", response_model=QberReportOut)
async def quick_run(body: SessionCreate):
    """Run a whole session in one call without keeping it."""
    noise = config.percent_to_probability(body.noise_percent, "noise_percent")
    eavesdropping = config.percent_to_probability(body.eavesdropping_percent, "eavesdropping_percent")
    report = SimulationSession(RandomSource(body.seed)).run_all(body.qubit_count, noise, eavesdropping)
    return QberReportOut.from_report(report)


# ===================================================================== #
#  HEALTH                                                                 #
# ===================================================================== #

@app.get("/api/health")
async def health():
    return {
        "status": "ok",
        "version": __version__,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "live_sessions": len(store),
        "security_threshold_percent": config.SECURITY_THRESHOLD_PERCENT,
    }


# ===================================================================== #
#  RUN                                                                    #
# ===================================================================== #

def run() -> None:
    import uvicorn
    configure_logging()
    uvicorn.run(app, host=config.API_HOST, port=config.API_PORT)


if __name__ == "__main__":
    run()
