"""Public short URL redirection with access logging."""

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Request, status
from starlette.responses import RedirectResponse

from shorturl.api.dependencies import get_access_log_service, get_resolution_service
from shorturl.services.access_log import AccessLogService
from shorturl.services.exceptions import URLUnavailableError
from shorturl.services.shortener import ResolutionService

# Create router with tags
router = APIRouter(tags=["redirect"])


@router.get(
    "/{short_code}",
    response_class=RedirectResponse,
    status_code=status.HTTP_302_FOUND
)
async def redirect_to_long_url(
    request: Request,
    background_tasks: BackgroundTasks,
    short_code: str,
    service: ResolutionService = Depends(get_resolution_service),
    access_log_service: AccessLogService = Depends(get_access_log_service)
):
    """Redirect to the long URL and record the access as a background task."""
    try:
        long_url = await service.resolve(short_code)
    except URLUnavailableError as e:
        # Expired and unknown codes look the same from outside
        raise HTTPException(status_code=404, detail=str(e))

    background_tasks.add_task(
        access_log_service.record,
        short_code,
        request.client.host if request.client else None,
        request.headers.get("user-agent")
    )

    return RedirectResponse(url=long_url, status_code=status.HTTP_302_FOUND)
