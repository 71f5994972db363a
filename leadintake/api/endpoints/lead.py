"""
Lead form endpoint.

Browser form posts get a 303 redirect on success and a small HTML page on
failure. Callers sending `Accept: application/json` get `{ok, error, details}`
bodies instead, which is the only place diagnostic details are exposed.
"""

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import HTMLResponse, JSONResponse, RedirectResponse, Response
from typing import Optional
import logging

from leadintake.core.config import Settings, get_settings
from leadintake.core.errors import LeadIntakeError, Unexpected
from leadintake.core.intake import LeadIntakeService
from leadintake.core.pages import render_status_page
from leadintake.models.lead import IntakeResult, RequestMeta

router = APIRouter()
logger = logging.getLogger(__name__)


def get_intake_service(settings: Settings = Depends(get_settings)) -> LeadIntakeService:
    return LeadIntakeService(settings)


def client_ip(request: Request) -> Optional[str]:
    """Caller address as reported by Cloudflare, or the first proxy hop"""
    ip = request.headers.get("CF-Connecting-IP")
    if ip:
        return ip.strip()
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip() or None
    return None


def request_meta(request: Request) -> RequestMeta:
    return RequestMeta(
        ip=client_ip(request),
        user_agent=request.headers.get("User-Agent"),
        referer=request.headers.get("Referer"),
        accept=request.headers.get("Accept"),
    )


def error_response(error: LeadIntakeError, meta: RequestMeta, settings: Settings) -> Response:
    if meta.wants_json:
        return JSONResponse(status_code=error.status_code, content=error.to_payload())
    return HTMLResponse(
        content=render_status_page(error.message, site_name=settings.site_name),
        status_code=error.status_code,
    )


def success_response(result: IntakeResult, meta: RequestMeta, settings: Settings) -> Response:
    if meta.wants_json:
        return JSONResponse(
            status_code=status.HTTP_200_OK,
            content={
                "ok": True,
                "formType": result.category.value,
                "autoReply": result.auto_reply_status,
            },
        )
    return RedirectResponse(url=settings.success_redirect_url, status_code=status.HTTP_303_SEE_OTHER)


@router.post("/lead")
async def submit_lead(request: Request, service: LeadIntakeService = Depends(get_intake_service)):
    """
    Accept a lead form post: verify Turnstile, route by formType, email it
    via Resend and send the category's auto-reply when it has one.
    """
    meta = request_meta(request)
    settings = service.settings

    try:
        body = await request.body()
        result = await service.handle(body, request.headers.get("Content-Type"), meta)
    except LeadIntakeError as e:
        logger.warning(f"Lead submission refused: {e.code} ({e.status_code})")
        return error_response(e, meta, settings)
    except Exception as e:
        logger.exception(f"Unexpected error handling lead submission: {str(e)}")
        return error_response(Unexpected(details=str(e) or type(e).__name__), meta, settings)

    return success_response(result, meta, settings)
