from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger
import os

from src.api_ticket_endpoints import ticket_ocr_router

APP_VERSION = "1.0.0"

app = FastAPI(
    title="SHIOL+ Ticket OCR",
    description="Recovers lottery plays from OCR text of photographed tickets",
    version=APP_VERSION,
)

# CORS origins come from the environment; default allows the local frontend
cors_origins = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(ticket_ocr_router)


@app.get("/api/v1/health")
async def health_check():
    return {"status": "ok", "version": APP_VERSION}


logger.info(f"SHIOL+ Ticket OCR API initialized (version {APP_VERSION})")
