"""Short URL management endpoints.

Business failures are reported inside the response envelope with HTTP 200;
only a transient generation failure changes the status code.
"""

import math

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import JSONResponse
from loguru import logger
from starlette.responses import RedirectResponse

from shorturl.api import schemas
from shorturl.api.dependencies import get_base_url, get_resolution_service
from shorturl.models.url import ShortURL, to_utc
from shorturl.services.exceptions import (
    InvalidExpirationError,
    ShortCodeAlreadyExistsError,
    ShortCodeGenerationError,
    URLCreationError,
    URLUnavailableError,
)
from shorturl.services.shortener import ResolutionService

router = APIRouter(prefix="/shorturls", tags=["shortener"])


def to_response(url: ShortURL, base_url: str) -> schemas.URLResponse:
    return schemas.URLResponse(
        short_code=url.short_code,
        long_url=url.long_url,
        short_url=f"{base_url}/{url.short_code}",
        created_at=to_utc(url.created_at),
        expires_at=to_utc(url.expires_at),
        is_custom=url.is_custom,
        click_count=url.click_count
    )


@router.post(
    "/shorten",
    response_model=schemas.APIResult[schemas.URLResponse],
    responses={
        503: {"model": schemas.APIResult, "description": "No free short code right now, retry"}
    }
)
async def create_short_url(
    url_data: schemas.URLCreateRequest,
    service: ResolutionService = Depends(get_resolution_service),
    base_url: str = Depends(get_base_url)
):
    try:
        url = await service.create_short_url(
            long_url=url_data.long_url,
            custom_code=url_data.custom_code,
            expires_at=url_data.expires_at
        )
    except (ShortCodeAlreadyExistsError, InvalidExpirationError) as e:
        return schemas.APIResult.error(str(e))
    except ShortCodeGenerationError as e:
        logger.warning(f"Short code generation exhausted: {e}")
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content=schemas.APIResult.error(str(e)).model_dump()
        )
    except URLCreationError as e:
        logger.error(f"Short URL creation failed: {e}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=schemas.APIResult.error("Failed to create short URL").model_dump()
        )

    return schemas.APIResult.success(to_response(url, base_url))


@router.post(
    "/list",
    response_model=schemas.APIResult[schemas.PageResult[schemas.URLResponse]]
)
async def list_urls(
    query: schemas.URLQueryRequest,
    service: ResolutionService = Depends(get_resolution_service),
    base_url: str = Depends(get_base_url)
):
    urls, total = await service.list_urls(
        page_num=query.page_num,
        page_size=query.page_size,
        short_code=query.short_code,
        long_url=query.long_url
    )
    page = schemas.PageResult[schemas.URLResponse](
        records=[to_response(url, base_url) for url in urls],
        total=total,
        size=query.page_size,
        current=query.page_num,
        pages=math.ceil(total / query.page_size)
    )
    return schemas.APIResult.success(page)


@router.get(
    "/{short_code}",
    response_class=RedirectResponse,
    status_code=status.HTTP_301_MOVED_PERMANENTLY
)
async def resolve_short_url(
    short_code: str,
    service: ResolutionService = Depends(get_resolution_service)
):
    """Permanent redirect to the long URL."""
    try:
        long_url = await service.resolve(short_code)
    except URLUnavailableError as e:
        raise HTTPException(status_code=404, detail=str(e))

    return RedirectResponse(url=long_url, status_code=status.HTTP_301_MOVED_PERMANENTLY)
