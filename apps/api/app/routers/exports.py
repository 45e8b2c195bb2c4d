"""Export routes for downloading Anki files."""

from urllib.parse import quote

from fastapi import APIRouter, HTTPException
from fastapi.responses import Response

from app.schemas.api import ExportRequest
from app.settings import settings
from vocab2anki_core.exporters.config import ExportConfig
from vocab2anki_core.exporters.errors import ExportIOError
from vocab2anki_core.exporters.orchestrator import ExportOrchestrator
from vocab2anki_core.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter()


def get_orchestrator(config: ExportConfig) -> ExportOrchestrator:
    """Build the orchestrator for one export request."""
    return ExportOrchestrator(config=config)


@router.post("/exports")
async def export_cards(request: ExportRequest) -> Response:
    """Export cards and return the artifact as a file download.

    The produced format may be a degraded one; ``X-Export-Format`` names it.
    """
    if not request.cards:
        raise HTTPException(status_code=400, detail="No cards to export")

    config = ExportConfig(
        deck_name=request.deck_name or settings.default_deck_name,
        requested_format=request.format or settings.default_format,
        media_fetch_timeout=settings.media_fetch_timeout,
        media_fetch_attempts=settings.media_fetch_attempts,
    )

    try:
        artifact = await get_orchestrator(config).export(request.cards)
    except ExportIOError as e:
        logger.error(f"Export failed: {e}")
        raise HTTPException(status_code=500, detail="Export failed") from e

    return Response(
        content=artifact.content,
        media_type=artifact.media_type,
        headers={
            "Content-Disposition": f"attachment; filename*=UTF-8''{quote(artifact.filename)}",
            "X-Export-Format": artifact.format.value,
            "X-Card-Count": str(artifact.card_count),
        },
    )
