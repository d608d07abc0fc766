# -*- coding: utf-8 -*-
from __future__ import annotations
import logging, os
from pathlib import Path
from fastapi import Depends, FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from starlette.responses import JSONResponse
from dotenv import load_dotenv

from whiteboard.errors import AIRequestFailed, InvalidInput

from whiteboard_api.event_log import EventLogger
from whiteboard_api.logging_setup import resolve_logs_dir, setup_logging
from whiteboard_api.mediator import AIRequestMediator
from whiteboard_api.schemas import (
    AskAIRequest, AskAIResponse, GenerateIdeaRequest, GenerateIdeaResponse,
    Health, LogoutResponse,
)


# ------------------------------ Environment --------------------------------- #
# Load .env from the project root so working directory changes do not break configuration.
load_dotenv(Path(__file__).resolve().parents[1] / ".env")

logger = logging.getLogger(__name__)

app = FastAPI(title="Whiteboard AI Gateway", version="0.1.0")

# CORS configuration (development friendly).
# Supported modes:
#   1) CORS_ORIGINS="*"          -> allow all origins, credentials disabled.
#   2) CORS_ORIGINS empty         -> allow localhost/127.0.0.1 on any port.
#   3) CORS_ORIGINS=a,b,c         -> allow only the listed origins.
_env_cors = os.getenv("CORS_ORIGINS", "").strip()
if _env_cors == "*":
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )
elif _env_cors:
    origins = [o.strip() for o in _env_cors.split(",") if o.strip()]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
else:
    app.add_middleware(
        CORSMiddleware,
        allow_origin_regex=r"^http://(localhost|127\.0\.0\.1)(:\d+)?$",
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

LOG_IO = os.getenv("LOG_IO", "true").lower() in ("1", "true", "yes")
SESSION_COOKIE_NAME = os.getenv("SESSION_COOKIE_NAME", "app_session_id")
_LOGS_DIR = resolve_logs_dir()

_mediator = AIRequestMediator(events=EventLogger(_LOGS_DIR / "events", enabled=LOG_IO))

FAILURE_DETAIL = {
    "ask": "Failed to get AI response",
    "idea": "Failed to generate drawing idea",
}


def get_mediator() -> AIRequestMediator:
    return _mediator


@app.on_event("startup")
def on_startup():
    setup_logging(_LOGS_DIR)
    logger.info("whiteboard gateway up: model=%s logs=%s", os.getenv("OPENAI_MODEL") or "unset", _LOGS_DIR)


# ------------------------------ Error mapping --------------------------------- #
@app.exception_handler(InvalidInput)
async def _invalid_input(request: Request, exc: InvalidInput):
    return JSONResponse(status_code=400, content={"detail": str(exc)})

@app.exception_handler(AIRequestFailed)
async def _ai_failed(request: Request, exc: AIRequestFailed):
    # The cause was already logged by the mediator; clients only get the generic message.
    detail = FAILURE_DETAIL.get(exc.operation, "AI request failed")
    return JSONResponse(status_code=502, content={"detail": detail})

# Uniform exception handler: keep CORS headers and a JSON body clients can read.
@app.exception_handler(Exception)
async def _unhandled_except(request: Request, exc: Exception):
    logger.exception("unhandled error on %s", request.url.path)
    return JSONResponse(status_code=500, content={"detail": f"internal error: {exc.__class__.__name__}"})


# ------------------------------ Routes --------------------------------- #
@app.get("/health", response_model=Health)
def health():
    return Health(
        status="ok",
        model=os.getenv("OPENAI_MODEL") or "unset",
        base_url=os.getenv("OPENAI_BASE_URL") or "unset",
    )

@app.post("/whiteboard/askAI", response_model=AskAIResponse)
def ask_ai(req: AskAIRequest, mediator: AIRequestMediator = Depends(get_mediator)):
    """Answer a question about the board; vision-grounded when imageData is present."""
    answer = mediator.ask_question(req.question, req.imageData)
    return AskAIResponse(answer=answer)

@app.post("/whiteboard/generateIdea", response_model=GenerateIdeaResponse)
def generate_idea(req: GenerateIdeaRequest, mediator: AIRequestMediator = Depends(get_mediator)):
    idea = mediator.generate_idea(req.imageData)
    return GenerateIdeaResponse(idea=idea)

def _is_secure(request: Request) -> bool:
    proto = request.headers.get("x-forwarded-proto", "").split(",")[0].strip()
    return (proto or request.url.scheme) == "https"

@app.post("/auth/logout", response_model=LogoutResponse)
def logout(request: Request, response: Response):
    secure = _is_secure(request)
    response.delete_cookie(
        SESSION_COOKIE_NAME,
        path="/",
        httponly=True,
        secure=secure,
        samesite="none" if secure else "lax",
    )
    return LogoutResponse(success=True)
