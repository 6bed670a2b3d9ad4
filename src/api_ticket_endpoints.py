"""
API endpoints for ticket OCR play extraction.
"""

from fastapi import APIRouter, UploadFile, File, HTTPException, Query
from pydantic import BaseModel, Field
from loguru import logger
from typing import List, Optional

from src.ocr_service import OCRUnavailableError
from src.ticket_ocr import list_games
from src.ticket_processor import create_ticket_processor

MAX_UPLOAD_BYTES = 25 * 1024 * 1024

# Create router for ticket OCR endpoints
ticket_ocr_router = APIRouter(prefix="/api/v1/ticket-ocr", tags=["ticket-ocr"])

# Initialize processor
ticket_processor = create_ticket_processor()


class ExtractionOverrides(BaseModel):
    min_num: Optional[int] = None
    max_num: Optional[int] = None
    main_count: Optional[int] = None
    bonus_count: Optional[int] = None
    letter_alphabet: Optional[str] = None
    max_groups: Optional[int] = None


class ParseTextRequest(BaseModel):
    text: str = Field(..., description="Raw OCR text of one ticket")
    game: Optional[str] = None
    overrides: Optional[ExtractionOverrides] = None
    complete_with_canonical: Optional[bool] = None


@ticket_ocr_router.get("/health")
async def ticket_ocr_health():
    """
    Health check endpoint for ticket OCR service.

    Returns:
        Service health status
    """
    return {
        "status": "healthy",
        "service": "ticket_ocr",
        "version": "1.0.0",
        "ocr_engine_available": ticket_processor.ocr_available,
        "default_game": ticket_processor.settings.default_game,
    }


@ticket_ocr_router.get("/games")
async def get_supported_games():
    """List the game presets extraction can run against."""
    return {"success": True, "games": list_games()}


@ticket_ocr_router.post("/parse-text")
async def parse_ticket_text(body: ParseTextRequest):
    """
    Extract plays from already transcribed ticket text.

    Args:
        body: Text, optional game preset and per-call overrides

    Returns:
        Extracted draws and their count
    """
    overrides = body.overrides.model_dump(exclude_none=True) if body.overrides else None
    game = body.game or ticket_processor.settings.default_game

    try:
        result = ticket_processor.process_text(
            body.text,
            game=game,
            overrides=overrides,
            complete_with_canonical=body.complete_with_canonical,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Error parsing ticket text: {e}")
        raise HTTPException(status_code=500, detail="Failed to parse ticket text")

    return {"success": True, "game": game, **result}


@ticket_ocr_router.post("/scan")
async def scan_ticket_images(
    files: List[UploadFile] = File(...),
    game: Optional[str] = Query(None),
    complete_with_canonical: Optional[bool] = Query(None),
):
    """
    OCR one or more ticket photos and extract their plays.

    Plays are returned in upload order; a play found on several images is
    returned once.
    """
    images = []
    for upload in files:
        if not upload.content_type or not upload.content_type.startswith('image/'):
            raise HTTPException(
                status_code=400,
                detail=f"Invalid file type for {upload.filename}: must be an image (JPG, PNG, etc.)"
            )

        image_data = await upload.read()
        if len(image_data) == 0:
            raise HTTPException(status_code=400, detail=f"Uploaded file {upload.filename} is empty")
        if len(image_data) > MAX_UPLOAD_BYTES:
            raise HTTPException(status_code=400, detail="File size too large. Maximum size is 25MB")

        logger.info(f"Received ticket image: {upload.filename}, size: {len(image_data)} bytes")
        images.append(image_data)

    game = game or ticket_processor.settings.default_game

    try:
        result = ticket_processor.process_images(
            images,
            game=game,
            complete_with_canonical=complete_with_canonical,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except OCRUnavailableError as e:
        logger.error(f"Ticket scan rejected: {e}")
        raise HTTPException(status_code=503, detail="OCR engine not configured")
    except Exception as e:
        logger.error(f"Error scanning ticket images: {e}")
        raise HTTPException(status_code=500, detail="Failed to process ticket images")

    return {"success": True, "game": game, **result}
