"""Export endpoints for downloading the business directory."""

import logging

from fastapi import APIRouter
from fastapi.responses import Response

from bizdir.config import settings
from bizdir.schemas.export import ExportRequest
from bizdir.services import export_service
from bizdir.services.auth import Store

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("")
async def export_businesses(request: ExportRequest, store: Store) -> Response:
    """Export businesses as XLSX, CSV, DOCX or a mailing-list CSV.

    With ``ids`` only those businesses are exported, in store order; without
    them (or with an empty list) the whole directory is.
    """
    businesses = export_service.select_businesses(await store.list_all(), request.ids)
    content = export_service.render_export(request.format, businesses)
    filename = export_service.generate_filename(
        request.format,
        request.custom_name,
        default_basename=settings.export_default_basename,
    )

    logger.info(
        "Exported %d businesses as %s (%s)", len(businesses), request.format.value, filename
    )
    return Response(
        content=content,
        media_type=export_service.get_content_type(request.format),
        headers={"Content-Disposition": export_service.content_disposition(filename)},
    )
