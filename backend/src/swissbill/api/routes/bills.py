"""
QR-bill endpoints.

Encodes payment payloads, renders bill documents and derives
creditor references.
"""

import asyncio
import logging

from fastapi import APIRouter, HTTPException, Response, status
from fastapi.concurrency import run_in_threadpool

from swissbill.api.schemas import (
    GenerateReferenceRequest,
    PayloadResponse,
    ReferenceKindEnum,
    ReferenceResponse,
    ReferenceTypeEnum,
    RenderBillRequest,
)
from swissbill.config import get_settings
from swissbill.domain.formatting import format_amount_for_payload, format_reference_display
from swissbill.domain.references import ReferenceKind, generate_qr_reference, generate_scor_reference
from swissbill.services.billing import QRBillService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["bills"])

SVG_MEDIA_TYPE = "image/svg+xml"


# Service instance (would be injected via dependency injection in production)
_bill_service: QRBillService | None = None


def get_bill_service() -> QRBillService:
    """Get or create the bill service instance."""
    global _bill_service
    if _bill_service is None:
        settings = get_settings()
        _bill_service = QRBillService(
            default_country=settings.default_country,
            default_currency=settings.default_currency,
        )
    return _bill_service


@router.post(
    "/bills/payload",
    response_model=PayloadResponse,
    responses={
        422: {"description": "Missing company settings or unencodable field"},
    },
)
async def encode_bill_payload(request: RenderBillRequest) -> PayloadResponse:
    """
    Build the Swiss Payments Code for an invoice.

    Returns the reference and the exact text that goes into the QR symbol.
    """
    service = get_bill_service()
    payload = service.build_payload(request.invoice.to_domain(), request.company.to_domain())

    return PayloadResponse(
        reference_kind=ReferenceKindEnum(payload.reference.kind.value),
        reference=payload.reference.value,
        reference_display=payload.reference.display,
        currency=payload.currency,
        amount=format_amount_for_payload(payload.amount),
        encoded_text=payload.encoded_text,
        lines=payload.lines,
    )


@router.post(
    "/bills/svg",
    response_class=Response,
    responses={
        200: {"content": {SVG_MEDIA_TYPE: {}}, "description": "QR-bill document"},
        422: {"description": "Missing company settings, unencodable field or payload too large"},
        504: {"description": "Rendering timed out"},
    },
)
async def render_bill_svg(request: RenderBillRequest) -> Response:
    """
    Render the QR-bill (Receipt + Payment Part) as a 210mm x 105mm SVG.

    Rendering runs in the thread pool under the configured timeout.
    """
    settings = get_settings()
    service = get_bill_service()
    invoice = request.invoice.to_domain()
    company = request.company.to_domain()

    try:
        document = await asyncio.wait_for(
            run_in_threadpool(service.render, invoice, company),
            timeout=settings.render_timeout_seconds,
        )
    except asyncio.TimeoutError:
        logger.error(f"Rendering invoice {invoice.id} exceeded {settings.render_timeout_seconds}s")
        raise HTTPException(
            status_code=status.HTTP_504_GATEWAY_TIMEOUT,
            detail="Rendering the QR-bill timed out",
        )

    return Response(content=document.svg, media_type=SVG_MEDIA_TYPE)


@router.post("/references", response_model=ReferenceResponse)
async def generate_reference(request: GenerateReferenceRequest) -> ReferenceResponse:
    """Derive a QR reference or creditor reference from free input."""
    if request.kind == ReferenceTypeEnum.QR:
        kind = ReferenceKind.QRR
        value = generate_qr_reference(request.raw_input)
    else:
        kind = ReferenceKind.SCOR
        value = generate_scor_reference(request.raw_input)

    return ReferenceResponse(
        kind=ReferenceKindEnum(kind.value),
        value=value,
        display=format_reference_display(value, kind),
    )
