"""
Diagnostic HTTP endpoint for live bootstrap runs.

Serves profiling views while the CLI is running (default localhost:6060):

    GET /debug/health     liveness
    GET /debug/last-run   latest ResamplingProfile
    GET /debug/threads    live threads and their current stacks
    GET /debug/memory     tracemalloc status

The server runs on a daemon thread so it never blocks process exit.
"""

from __future__ import annotations

import logging
import sys
import threading
import tracemalloc
import traceback
from typing import Any, Dict, List, Optional

import uvicorn
from fastapi import FastAPI, HTTPException
from pydantic import BaseModel

from median_bootstrap.summary import ResamplingProfile

logger = logging.getLogger(__name__)


class HealthResponse(BaseModel):
    status: str


class ThreadInfo(BaseModel):
    name: str
    ident: Optional[int]
    daemon: bool
    stack: List[str]


class MemoryResponse(BaseModel):
    tracing: bool
    current_bytes: int
    peak_bytes: int


class DiagnosticsState:
    """Thread-safe holder for the most recent run profile."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._profile: Optional[ResamplingProfile] = None

    def record(self, profile: ResamplingProfile) -> None:
        with self._lock:
            self._profile = profile

    def latest(self) -> Optional[ResamplingProfile]:
        with self._lock:
            return self._profile


def _thread_snapshot() -> List[ThreadInfo]:
    frames = sys._current_frames()
    snapshot = []
    for thread in threading.enumerate():
        frame = frames.get(thread.ident) if thread.ident is not None else None
        stack = [line.rstrip("\n") for line in traceback.format_stack(frame)] if frame else []
        snapshot.append(
            ThreadInfo(name=thread.name, ident=thread.ident, daemon=thread.daemon, stack=stack)
        )
    return snapshot


def create_diagnostics_app(state: DiagnosticsState) -> FastAPI:
    app = FastAPI(
        title="Bootstrap Median Diagnostics",
        description="Profiling views for a running bootstrap median estimation.",
        version="0.1.0",
    )

    @app.get("/debug/health", response_model=HealthResponse)
    def health() -> HealthResponse:
        return HealthResponse(status="ok")

    @app.get("/debug/last-run")
    def last_run() -> Dict[str, Any]:
        """Profile of the most recent completed run."""
        profile = state.latest()
        if profile is None:
            raise HTTPException(status_code=404, detail="no resampling run has completed yet")
        return profile.to_dict()

    @app.get("/debug/threads", response_model=List[ThreadInfo])
    def threads() -> List[ThreadInfo]:
        return _thread_snapshot()

    @app.get("/debug/memory", response_model=MemoryResponse)
    def memory() -> MemoryResponse:
        tracing = tracemalloc.is_tracing()
        current, peak = tracemalloc.get_traced_memory() if tracing else (0, 0)
        return MemoryResponse(tracing=tracing, current_bytes=current, peak_bytes=peak)

    return app


class DiagnosticsServer:
    """uvicorn server for the diagnostics app, run on a background thread."""

    def __init__(self, app: FastAPI, host: str = "localhost", port: int = 6060):
        self.host = host
        self.port = port
        self._server = uvicorn.Server(
            uvicorn.Config(app, host=host, port=port, log_level="warning")
        )
        self._thread: Optional[threading.Thread] = None

    def _serve(self) -> None:
        try:
            self._server.run()
        except (OSError, SystemExit) as exc:
            logger.warning(
                "diagnostics server on %s:%d stopped: %r", self.host, self.port, exc
            )

    def start(self) -> None:
        logger.info("Starting diagnostics server on %s:%d", self.host, self.port)
        self._thread = threading.Thread(
            target=self._serve, name="diagnostics-server", daemon=True
        )
        self._thread.start()

    def stop(self, timeout: float = 5.0) -> None:
        self._server.should_exit = True
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None
