# pocketbook/routers/system.py
from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlmodel import Session

from pocketbook.config import get_settings
from pocketbook.db import get_session, is_alive

VERSION = "1.0.0"

router = APIRouter(tags=["system"])


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


@router.get("/")  # informational root
def root():
    return {
        "message": "Pocketbook student finance API",
        "status": "Running",
        "version": VERSION,
        "timestamp": _timestamp(),
    }


@router.get("/api/health")  # liveness + store check
def health(session: Session = Depends(get_session)):
    connected = is_alive(session)
    return JSONResponse(
        status_code=200 if connected else 503,
        content={
            "status": "OK" if connected else "Degraded",
            "database": "Connected" if connected else "Disconnected",
            "environment": get_settings().environment,
            "timestamp": _timestamp(),
        },
    )
