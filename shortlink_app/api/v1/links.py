from fastapi import APIRouter, Depends, HTTPException, status
from shortlink_app.schemas.link import ShortLinkResponse
from shortlink_app.services.link_service import LinkService
from shortlink_app.dependencies import get_link_service

router = APIRouter(prefix="/links", tags=["links"])


@router.get("/{code}", response_model=ShortLinkResponse)
async def get_link_info(
    code: str,
    link_service: LinkService = Depends(get_link_service)
):
    """Get the stored details of a short link"""
    link = await link_service.get_link(code)
    if not link:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Short link not found"
        )
    return link
