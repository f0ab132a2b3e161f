"""HTTP router for the admin UI.

Maps the UI's paths onto a BridgeSession: token acquisition via the OAuth
callback, intent replacement, and utterance detection. Pages are not rendered
here; routes answer with JSON or redirects.
"""

from __future__ import annotations

import json
import logging
import time
from contextlib import asynccontextmanager
from typing import Any

from fastapi import Body, FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse, RedirectResponse
from pydantic import ValidationError

from dialogflow_bridge.config import get_config
from dialogflow_bridge.models.intents import IntentInput, SyncReport
from dialogflow_bridge.services.intents import parse_intent_map
from dialogflow_bridge.session import BridgeSession
from dialogflow_bridge.utils.errors import (
    BridgeError,
    ProviderError,
    StorageUnavailable,
    SyncAbortedError,
    TransportError,
    ValidationFailure,
)

logger = logging.getLogger(__name__)


def _authorized_token(session: BridgeSession) -> str | None:
    """The persisted token if it still validates, else None (caller must re-authorize)."""
    try:
        return session.authorized_token()
    except (StorageUnavailable, ValidationFailure) as e:
        logger.info(f"Authorization required: {e}")
        return None


def create_app(session: BridgeSession | None = None) -> FastAPI:
    @asynccontextmanager
    async def _lifespan(app: FastAPI):
        owned = session is None
        app.state.session = session or BridgeSession.from_config(get_config())
        logger.info("Dialogflow bridge starting up")
        try:
            yield
        finally:
            if owned:
                app.state.session.close()

    app = FastAPI(title="Dialogflow Bridge", version="0.1.0", lifespan=_lifespan)

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        ms = int((time.perf_counter() - start) * 1000)
        response.headers["X-Response-Time"] = f"{ms}ms"
        logger.info(f"{request.method} {request.url} - {ms}")
        return response

    @app.exception_handler(SyncAbortedError)
    async def _sync_aborted_handler(request: Request, exc: SyncAbortedError) -> JSONResponse:
        return JSONResponse(
            status_code=502,
            content={"error": str(exc), "report": exc.report.summary()},
        )

    @app.exception_handler(ProviderError)
    async def _provider_error_handler(request: Request, exc: ProviderError) -> JSONResponse:
        return JSONResponse(
            status_code=502,
            content={"error": str(exc), "status_code": exc.status_code, "detail": exc.detail},
        )

    @app.exception_handler(TransportError)
    async def _transport_error_handler(request: Request, exc: TransportError) -> JSONResponse:
        return JSONResponse(status_code=504, content={"error": str(exc)})

    @app.exception_handler(BridgeError)
    async def _bridge_error_handler(request: Request, exc: BridgeError) -> JSONResponse:
        return JSONResponse(status_code=503, content={"error": str(exc)})

    def _session(request: Request) -> BridgeSession:
        return request.app.state.session

    def _run_sync(request: Request, intent_map: dict[str, IntentInput]) -> Any:
        current = _session(request)
        token = _authorized_token(current)
        if token is None:
            return RedirectResponse("/oauth2callback")
        report: SyncReport = current.sync_intents(intent_map, token=token)
        return report.summary()

    @app.get("/")
    def index() -> RedirectResponse:
        return RedirectResponse("/createIntent")

    @app.get("/createIntent")
    def create_intent(request: Request) -> Any:
        if _authorized_token(_session(request)) is None:
            return RedirectResponse("/oauth2callback")
        return {"authorized": True}

    @app.get("/oauth2callback")
    def oauth2callback(request: Request, code: str | None = None, error: str | None = None) -> RedirectResponse:
        if error is not None:
            logger.warning(f"Authorization error from provider: {error}")

        current = _session(request)
        if code is None:
            return RedirectResponse(current.get_authorization_url())

        try:
            current.exchange_code(code)
        except (ProviderError, TransportError) as e:
            logger.warning(f"Token exchange failed: {e}")
            return RedirectResponse("/default")
        return RedirectResponse("/createIntent")

    @app.get("/updateModel")
    def update_model(request: Request, intents: str | None = None, error: str | None = None) -> Any:
        if error is not None:
            logger.warning(f"Error in model data: {error}")
        if intents is None:
            raise HTTPException(status_code=400, detail="Missing 'intents' query parameter")
        try:
            intent_map = json.loads(intents)
        except json.JSONDecodeError as e:
            raise HTTPException(status_code=400, detail=f"Invalid intents JSON: {e}") from e
        if not isinstance(intent_map, dict):
            raise HTTPException(status_code=400, detail="Intents must be a JSON object")
        try:
            desired = parse_intent_map(intent_map)
        except ValidationError as e:
            raise HTTPException(status_code=400, detail=f"Invalid intent entry: {e}") from e
        return _run_sync(request, desired)

    @app.post("/updateModel")
    def update_model_body(request: Request, intents: dict[str, IntentInput] = Body(...)) -> Any:
        return _run_sync(request, intents)

    @app.get("/useModel")
    def use_model(
        request: Request,
        utterance: str | None = None,
        session_id: str | None = None,
        error: str | None = None,
    ) -> Any:
        if error is not None:
            logger.warning(f"Error in query data: {error}")
        if utterance is None:
            return {"ready": True}

        current = _session(request)
        token = _authorized_token(current)
        if token is None:
            return RedirectResponse("/oauth2callback")
        return JSONResponse(content=current.detect(utterance, session_id=session_id, token=token))

    @app.get("/{path:path}")
    def default(path: str) -> dict[str, str]:
        return {"status": "ok"}

    return app
