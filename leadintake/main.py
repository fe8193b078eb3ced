import logging

from fastapi import FastAPI
from leadintake.config import LOG_LEVEL
from leadintake.routers import buyer, imports, export

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(
    title="Lead Intake",
    version="1.0.0"
)

# --- Register Routers ---
app.include_router(buyer.router)      # /api/v1/buyers/*
app.include_router(imports.router)    # /api/v1/import/*
app.include_router(export.router)     # /api/v1/export


# --- Root health check ---
@app.get("/")
async def root():
    return {"message": "Lead Intake API is running"}
