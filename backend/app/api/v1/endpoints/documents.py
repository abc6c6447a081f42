"""
BizDesk - Document endpoints
POST /documents/generate-pdf, /documents/preview, /documents/validate
GET /documents/templates, /documents/templates/{template}
"""
import logging
from datetime import datetime, timezone
from typing import Annotated

from fastapi import APIRouter, Depends, Response
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from app.api.deps import AuthUser
from app.core.errors import ApiError, ErrorCode, ResourceValidationError
from app.core.responses import success_response
from app.schemas.documents import GeneratePdfRequest, PreviewDocumentRequest
from app.services.document_service import DocumentTemplates, get_document_templates, sanitize_data
from app.services.pdf_renderer import PdfRenderer, get_pdf_renderer

logger = logging.getLogger(__name__)

router = APIRouter()

Templates = Annotated[DocumentTemplates, Depends(get_document_templates)]
Renderer = Annotated[PdfRenderer, Depends(get_pdf_renderer)]


def _download_name(template: str, filename: str | None) -> str:
    name = filename or f"{template}_{datetime.now(timezone.utc):%Y-%m-%d_%H-%M-%S}"
    return name if name.lower().endswith(".pdf") else f"{name}.pdf"


@router.post("/generate-pdf")
async def generate_pdf(
    body: GeneratePdfRequest, user: AuthUser, templates: Templates, renderer: Renderer
) -> Response:
    """Render a template with the given data and return it as a PDF download."""
    template = templates.get(body.template)
    filename = _download_name(body.template, body.filename)
    logger.info(
        "PDF generation request: user=%s template=%s filename=%s data_keys=%s",
        user.id, body.template, filename, sorted(body.data),
    )

    data = sanitize_data(body.data)
    validation = templates.validate_data(body.template, data)
    if not validation["valid"]:
        raise ResourceValidationError({"data": validation["errors"]}, "Template data is invalid.")

    html = templates.render_html(body.template, data)
    try:
        pdf = await run_in_threadpool(renderer.render, html, body.options, template.metadata.get("title"))
    except Exception as exc:
        logger.error("PDF generation failed for template %s", body.template, exc_info=exc)
        raise ApiError("PDF generation failed", code=ErrorCode.INTERNAL_SERVER_ERROR) from exc

    logger.info("PDF generated: template=%s size=%d", body.template, len(pdf))
    return Response(
        content=pdf,
        media_type="application/pdf",
        headers={
            "Content-Disposition": f'attachment; filename="{filename}"',
            "Cache-Control": "no-cache, no-store, must-revalidate",
            "Pragma": "no-cache",
            "Expires": "0",
        },
    )


@router.get("/templates")
async def list_templates(templates: Templates) -> JSONResponse:
    return success_response(templates.catalog(), "Templates retrieved successfully")


@router.get("/templates/{template}")
async def template_info(template: str, templates: Templates) -> JSONResponse:
    found = templates.get(template)
    return success_response(
        {
            "template": template,
            "metadata": found.metadata,
            "config": found.as_config(),
            "exists": True,
        },
        "Template information retrieved successfully",
    )


@router.post("/preview")
async def preview_document(body: PreviewDocumentRequest, user: AuthUser, templates: Templates) -> JSONResponse:
    """Render the template to HTML without producing a PDF."""
    logger.info(
        "Document preview request: user=%s template=%s data_keys=%s",
        user.id, body.template, sorted(body.data),
    )
    preview = templates.render_html(body.template, sanitize_data(body.data), preview=True)
    return success_response(
        {
            "template": body.template,
            "preview": preview,
            "generated_at": datetime.now(timezone.utc).isoformat(),
        },
        "Preview generated successfully",
    )


@router.post("/validate")
async def validate_template_data(body: GeneratePdfRequest, templates: Templates) -> JSONResponse:
    validation = templates.validate_data(body.template, sanitize_data(body.data))
    return success_response(
        {
            "template": body.template,
            "validation": validation,
            "valid": validation["valid"],
        },
        "Template data validation completed",
    )
