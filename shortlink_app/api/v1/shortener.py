from fastapi import APIRouter, Depends, Response, status
from fastapi.responses import PlainTextResponse
from shortlink_app.schemas.link import ShortenRequest
from shortlink_app.services.link_service import LinkService
from shortlink_app.dependencies import get_link_service

router = APIRouter(tags=["shortener"])


@router.post(
    "/shorten",
    response_class=PlainTextResponse,
    responses={status.HTTP_400_BAD_REQUEST: {"description": "The specified URL is invalid."}},
)
async def shorten_url(
    payload: ShortenRequest,
    link_service: LinkService = Depends(get_link_service)
):
    """
    Create a short link and return its code as plain text.

    Invalid URLs are rejected with 400 by the InvalidURLError handler.
    """
    link = await link_service.create_short_link(payload.url)
    return PlainTextResponse(link.code)


@router.get(
    "/{code}",
    status_code=status.HTTP_302_FOUND,
    responses={status.HTTP_404_NOT_FOUND: {"description": "Unknown code"}},
)
async def redirect_to_target_url(
    code: str,
    link_service: LinkService = Depends(get_link_service)
):
    """Redirect to the original URL (cache first, then database)."""
    target_url = await link_service.resolve(code)
    if target_url is None:
        return Response(status_code=status.HTTP_404_NOT_FOUND)
    # Not RedirectResponse: it percent-quotes the URL, and Location must be verbatim
    return Response(status_code=status.HTTP_302_FOUND, headers={"location": target_url})
