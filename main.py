from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
import os

from core.config import logger, APP_NAME, ALLOWED_ORIGINS

# Routers
from routers import submit_email

app = FastAPI(title=f"{APP_NAME} signups")

# ---- CORS setup ----
app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=False,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type", "Accept"],
)


# --- Security headers ---
@app.middleware("http")
async def add_security_headers(request: Request, call_next):
    response = await call_next(request)
    response.headers.setdefault("X-Content-Type-Options", "nosniff")
    response.headers.setdefault("Referrer-Policy", "strict-origin-when-cross-origin")
    response.headers.setdefault("X-Frame-Options", "DENY")
    if os.getenv("DEBUG", "").lower() not in ("1", "true", "yes"):
        response.headers.setdefault("Strict-Transport-Security", "max-age=63072000; includeSubDomains")
    return response


# email capture submissions
app.include_router(submit_email.router)


@app.on_event("startup")
async def _init_schema():
    try:
        from core.database import init_db
        init_db()
    except Exception as _ex:
        logger.warning(f"init_db failed: {_ex}")


@app.get("/")
async def root():
    return {"ok": True}
