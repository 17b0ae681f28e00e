import logging
from datetime import datetime, timezone
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from .config import LOG_LEVEL
from .db import init_db
from .errors import SerializationError, SigningError
from .routers import signing

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="PDF Signing Engine")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Original-Hash", "X-Signed-Hash", "X-Skipped-Fields"],
)

@app.on_event("startup")
def on_startup():
    init_db()

@app.exception_handler(SigningError)
def signing_error_handler(request: Request, exc: SigningError):
    status_code = 500 if isinstance(exc, SerializationError) else 400
    logger.error("signing failed: %s", exc)
    return JSONResponse(status_code=status_code, content=exc.to_dict())

app.include_router(signing.router, prefix="/api", tags=["signing"])

@app.get("/")
def root():
    return {"ok": True, "service": "signing-engine"}

@app.get("/health")
def health():
    return {"status": "ok", "timestamp": datetime.now(timezone.utc).isoformat()}
