from __future__ import annotations

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import CONFIG
from .db import initialize_db
from .routes import notices as notice_routes
from .routes import onboarding as onboarding_routes

initialize_db()

app = FastAPI(
    title="Parent Journey API",
    version="0.1.0",
    description="Onboarding, sign-up gating and guided tour state for the parenting journal",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CONFIG.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
    allow_credentials=False,
)

app.include_router(onboarding_routes.router)
app.include_router(notice_routes.router)


@app.get("/health")
async def health() -> dict:
    return {"status": "ok"}


@app.get("/")
async def root() -> dict:
    return {"message": "Parent Journey API is running"}
