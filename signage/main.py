import os
import logging
from datetime import datetime, timezone
from fastapi import FastAPI, Request, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from signage.db import Base, engine, ensure_sqlite_schema
from signage.db import SessionLocal
from signage.api import auth, display, media, player, playlist, schedule
from signage.errors import SignageError
from signage.services.realtime import ConnectionRegistry, DisplayChannel, NotificationDispatcher
from signage.services.storage import ensure_storage

LOG_LEVEL = os.getenv("SIGNAGE_LOG_LEVEL", "INFO").strip().upper() or "INFO"
API_KEY = os.getenv("SIGNAGE_API_KEY", "").strip()
CORS_ORIGINS = [o.strip() for o in os.getenv("SIGNAGE_CORS_ORIGINS", "*").split(",") if o.strip()]
QUIET_ACCESS_LOG = os.getenv("SIGNAGE_QUIET_ACCESS_LOG", "1").strip().lower() in {"1", "true", "yes", "on"}
QUIET_WEBSOCKET_LOG = os.getenv("SIGNAGE_QUIET_WEBSOCKET_LOG", "1").strip().lower() in {"1", "true", "yes", "on"}
WS_REGISTER_TIMEOUT_SECONDS = float(os.getenv("SIGNAGE_WS_REGISTER_TIMEOUT_SECONDS", "60") or 60)
API_KEY_EXEMPT_PREFIXES = ("/docs", "/openapi.json", "/redoc", "/healthz", "/api/player", "/api/media/file")

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("signage")

if QUIET_ACCESS_LOG:
    # Keep warning/error lines, suppress normal access noise (200/201 etc).
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)

if QUIET_WEBSOCKET_LOG:
    # Players on flaky networks drop often; the transport's own tracebacks add nothing.
    logging.getLogger("websockets").setLevel(logging.CRITICAL)
    logging.getLogger("uvicorn.protocols.websockets").setLevel(logging.CRITICAL)

Base.metadata.create_all(bind=engine)
ensure_sqlite_schema()
ensure_storage()

app = FastAPI(title="signage-api")
app.state.registry = ConnectionRegistry()
app.state.dispatcher = NotificationDispatcher(app.state.registry)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS or ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(SignageError)
async def signage_error_handler(request: Request, exc: SignageError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.detail)
    return JSONResponse({"detail": exc.detail}, status_code=exc.status_code, headers=exc.headers)


@app.get("/")
def root():
    return {
        "ok": True,
        "service": "signage-api",
        "time_utc": datetime.now(timezone.utc).isoformat(),
        "docs": "/docs",
    }


@app.get("/healthz")
def healthz():
    return {"ok": True, "live_channels": len(app.state.registry)}


@app.websocket("/ws")
async def ws_display(websocket: WebSocket):
    channel = DisplayChannel(
        websocket,
        app.state.registry,
        SessionLocal,
        register_timeout=WS_REGISTER_TIMEOUT_SECONDS or None,
    )
    try:
        await channel.serve()
    except WebSocketDisconnect:
        pass
    except Exception:
        logger.exception("Display channel for %s failed", channel.display_id or "unregistered client")


@app.middleware("http")
async def api_key_middleware(request: Request, call_next):
    if not API_KEY:
        return await call_next(request)
    path = request.url.path
    if path == "/" or path.startswith(API_KEY_EXEMPT_PREFIXES):
        return await call_next(request)
    if request.headers.get("X-API-Key") != API_KEY:
        return JSONResponse({"detail": "Unauthorized"}, status_code=401)
    return await call_next(request)


app.include_router(auth.router)
app.include_router(player.router)
app.include_router(display.router)
app.include_router(media.router)
app.include_router(playlist.router)
app.include_router(schedule.router)
