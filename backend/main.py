from contextlib import asynccontextmanager
from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.datastructures import Headers
from starlette.types import ASGIApp, Message as ASGIMessage, Receive, Scope, Send
import logging
import os
import anthropic
from dotenv import load_dotenv

from analyzer import AnalysisError, analyze_with_claude
from models import (
    AnalyzeRequest,
    AnalyzeResponse,
    Message,
    RecommendationResponse,
    SessionView,
    Task,
)
from ranking import top_tasks, next_task
from sessions import RERUN, Session, SessionStore

load_dotenv()

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

ANTHROPIC_API_KEY = os.getenv("ANTHROPIC_API_KEY")
ANTHROPIC_MODEL = os.getenv("ANTHROPIC_MODEL", "claude-sonnet-4-5")
ANTHROPIC_TIMEOUT_SECONDS = float(os.getenv("ANTHROPIC_TIMEOUT_SECONDS", "30"))
ANTHROPIC_MAX_TOKENS = int(os.getenv("ANTHROPIC_MAX_TOKENS", "1024"))
MAX_BODY_BYTES = int(os.getenv("MAX_BODY_BYTES", "1000000"))
REMINDER_INTERVAL_MINUTES = float(os.getenv("REMINDER_INTERVAL_MINUTES", "15"))
CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv("CORS_ORIGINS", "http://localhost:5173").split(",")
    if origin.strip()
]

client = anthropic.AsyncAnthropic(
    api_key=ANTHROPIC_API_KEY,
    timeout=ANTHROPIC_TIMEOUT_SECONDS,
)


def api_key_configured() -> bool:
    return bool(ANTHROPIC_API_KEY) and ANTHROPIC_API_KEY != "your-api-key-here"


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    if not api_key_configured():
        logger.warning("ANTHROPIC_API_KEY is not set; analysis requests will fail")
    app.state.sessions = SessionStore(REMINDER_INTERVAL_MINUTES)
    yield
    # Shutdown
    app.state.sessions.close()

app = FastAPI(lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


class BodySizeLimitMiddleware:
    """
    Reject request bodies larger than MAX_BODY_BYTES with a 413.

    A declared Content-Length is checked up front; chunked bodies are counted
    as they stream in.
    """

    def __init__(self, app: ASGIApp):
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        limit = MAX_BODY_BYTES
        content_length = Headers(scope=scope).get("content-length")
        if content_length is not None:
            try:
                size = int(content_length)
            except ValueError:
                response = JSONResponse(status_code=400, content={"detail": "Invalid Content-Length"})
                await response(scope, receive, send)
                return
            if size > limit:
                response = JSONResponse(status_code=413, content={"detail": "Request body too large"})
                await response(scope, receive, send)
                return

        received = 0

        async def limited_receive() -> ASGIMessage:
            nonlocal received
            message = await receive()
            if message["type"] == "http.request":
                received += len(message.get("body", b""))
                if received > limit:
                    raise HTTPException(status_code=413, detail="Request body too large")
            return message

        await self.app(scope, limited_receive, send)


app.add_middleware(BodySizeLimitMiddleware)


def get_sessions(request: Request) -> SessionStore:
    return request.app.state.sessions


def get_session(session_id: str, sessions: SessionStore = Depends(get_sessions)) -> Session:
    session = sessions.get(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail="Session not found")
    return session


def require_input(request: AnalyzeRequest) -> str:
    text = (request.input or "").strip()
    if not text:
        raise HTTPException(status_code=400, detail="Input is required.")
    return text


async def run_analysis(text: str) -> list[Task]:
    """Send text to Claude, mapping failures onto HTTP errors."""
    if not api_key_configured():
        raise HTTPException(
            status_code=500,
            detail="Server missing ANTHROPIC_API_KEY. Add it to environment or .env file.",
        )
    try:
        return await analyze_with_claude(
            text, client, ANTHROPIC_MODEL, max_tokens=ANTHROPIC_MAX_TOKENS
        )
    except AnalysisError as e:
        raise HTTPException(status_code=502, detail=f"Could not analyze tasks: {e}") from e


async def analyze_into_session(session: Session, text: str) -> SessionView:
    """Analyze text and swap the result into the session; failures keep the old list."""
    session.begin_analysis(text)
    try:
        tasks = await run_analysis(text)
    except HTTPException as e:
        session.record_failure(e.detail)
        raise
    session.record_analysis(text, tasks)
    return session.view()


@app.post("/api/analyze")
async def analyze(analyze_request: AnalyzeRequest) -> AnalyzeResponse:
    """Stateless analysis: text in, normalized and classified tasks out."""
    text = require_input(analyze_request)
    return AnalyzeResponse(tasks=await run_analysis(text))


@app.post("/api/sessions", status_code=201)
async def create_session(sessions: SessionStore = Depends(get_sessions)) -> SessionView:
    return sessions.create().view()


@app.get("/api/sessions/{session_id}")
async def get_session_view(session: Session = Depends(get_session)) -> SessionView:
    return session.view()


@app.delete("/api/sessions/{session_id}")
async def delete_session(session_id: str, sessions: SessionStore = Depends(get_sessions)) -> dict:
    if not sessions.delete(session_id):
        raise HTTPException(status_code=404, detail="Session not found")
    return {"status": "deleted"}


@app.get("/api/sessions/{session_id}/conversation")
async def get_conversation(session: Session = Depends(get_session)) -> list[Message]:
    return session.messages


@app.post("/api/sessions/{session_id}/analyze")
async def analyze_in_session(
    analyze_request: AnalyzeRequest, session: Session = Depends(get_session)
) -> SessionView:
    text = require_input(analyze_request)
    session.say("user", text)
    return await analyze_into_session(session, text)


@app.post("/api/sessions/{session_id}/rerun")
async def rerun_analysis(session: Session = Depends(get_session)) -> SessionView:
    if not session.last_input:
        raise HTTPException(status_code=409, detail="Nothing to re-run yet.")
    session.say("assistant", RERUN)
    return await analyze_into_session(session, session.last_input)


@app.post("/api/sessions/{session_id}/clear")
async def clear_session(session: Session = Depends(get_session)) -> SessionView:
    session.clear()
    return session.view()


@app.post("/api/sessions/{session_id}/next")
async def recommend_next(session: Session = Depends(get_session)) -> RecommendationResponse:
    message = session.recommend_next()
    if message is None:
        raise HTTPException(status_code=409, detail="No tasks yet.")
    return RecommendationResponse(message=message, tasks=[next_task(session.tasks)])


@app.post("/api/sessions/{session_id}/rescue")
async def rescue(session: Session = Depends(get_session)) -> RecommendationResponse:
    """Reduce overwhelm: only the top three ranked tasks."""
    message = session.rescue()
    if message is None:
        raise HTTPException(status_code=409, detail="No tasks yet.")
    return RecommendationResponse(message=message, tasks=top_tasks(session.tasks))


@app.post("/api/sessions/{session_id}/reminders/start")
async def start_reminders(session: Session = Depends(get_session)) -> SessionView:
    if not session.tasks:
        raise HTTPException(status_code=409, detail="No tasks to remind about.")
    session.start_reminders()
    return session.view()


@app.post("/api/sessions/{session_id}/reminders/stop")
async def stop_reminders(session: Session = Depends(get_session)) -> SessionView:
    session.stop_reminders()
    return session.view()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=int(os.getenv("PORT", "8000")))
