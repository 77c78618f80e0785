# server/app.py
import json
import logging
from datetime import datetime, timezone
from typing import Any, Iterator, Optional

import httpx
from fastapi import Body, Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse

from .config import Settings, get_settings
from .groq_client import build_client
from .llm import GENERIC_FAILURE, make_plan_with_llm
from .schemas import ErrorOut, HealthOut, PlanError, PlanIn, PlanOutcome, RawText

logger = logging.getLogger(__name__)

app = FastAPI(title="Nexis Backend")

# browser clients on any domain may call /nexis
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


class AsciiJSONResponse(JSONResponse):
    """JSON body with non-ASCII escaped, so unpaired surrogates from the model still encode."""

    def render(self, content: Any) -> bytes:
        return json.dumps(
            content,
            ensure_ascii=True,
            allow_nan=False,
            separators=(",", ":"),
        ).encode("ascii")


def get_http_client(settings: Settings = Depends(get_settings)) -> Iterator[httpx.Client]:
    client = build_client(settings.groq_timeout_seconds)
    try:
        yield client
    finally:
        client.close()


def _error_response(status_code: int, body: ErrorOut) -> JSONResponse:
    return AsciiJSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True))


def _to_response(outcome: PlanOutcome) -> JSONResponse:
    if isinstance(outcome, PlanError):
        return _error_response(outcome.status_code, outcome.body)
    if isinstance(outcome, RawText):
        return AsciiJSONResponse(content={"raw": outcome.raw})
    return AsciiJSONResponse(content=outcome.plan)


def jsonable_errors(exc: RequestValidationError):
    # drop the raw input/ctx objects, they are not always JSON-serializable
    return [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg"), "type": err.get("type")}
        for err in exc.errors()
    ]


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return _error_response(
        422,
        ErrorOut(error="Invalid request body.", details=jsonable_errors(exc)),
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(
        "[app] unhandled exception on %s %s",
        request.method,
        request.url.path,
        exc_info=exc,
    )
    return _error_response(500, ErrorOut(error=GENERIC_FAILURE))


# ---------------------------------------------------------------------------
# Health
# ---------------------------------------------------------------------------


@app.get("/", response_class=PlainTextResponse)
def root() -> str:
    return "Nexis backend is running."


@app.get("/health", response_model=HealthOut)
def health() -> HealthOut:
    return HealthOut(ok=True, ts=datetime.now(timezone.utc).isoformat())


# ---------------------------------------------------------------------------
# /nexis – idea to project plan
# ---------------------------------------------------------------------------


@app.post("/nexis")
def nexis(
    payload: Optional[PlanIn] = Body(default=None),
    settings: Settings = Depends(get_settings),
    client: httpx.Client = Depends(get_http_client),
) -> JSONResponse:
    try:
        outcome = make_plan_with_llm(payload or PlanIn(), settings, client)
        return _to_response(outcome)
    except Exception:
        logger.exception("[app] /nexis failed")
        return _error_response(500, ErrorOut(error=GENERIC_FAILURE))
