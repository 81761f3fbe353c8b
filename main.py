"""
Main API module for Shortlink.

Responsibilities:
    - Expose REST endpoints for shortening URLs and redirecting short codes
    - Count visits in the background so redirects return as soon as the lookup succeeds
    - Owner-scoped listing, update and soft delete of short URLs
    - Provide a visit analytics summary, including failed visit counts

Architecture:
    - App Factory pattern (create_app) for test isolation and DI.
    - Storage backend chosen by SHORTLINK_STORAGE_BACKEND (memory, sqlite, postgres);
      tests may inject a storage/allocator pair directly.
    - Services (shortening, redirect, url manager) hold the rules; routes only
      translate HTTP to service calls. Domain errors map to status codes in one place.
"""

import logging
from typing import Any, Dict, Optional

from fastapi import BackgroundTasks, Depends, FastAPI, Query, Request, Response, status
from fastapi.responses import JSONResponse, RedirectResponse

from auth.dependencies import get_current_user, get_optional_user
from shortlink.analytics.analytics import Analytics
from shortlink.config import settings
from shortlink.errors import (
    AllocationFailure,
    CapacityExceeded,
    DuplicateCode,
    Forbidden,
    InvalidCode,
    InvalidURL,
    NotFound,
    ShortlinkError,
    StorageError,
)
from shortlink.manager import codec
from shortlink.manager.redirect import RedirectService
from shortlink.manager.shortening import ShorteningService
from shortlink.manager.url_manager import UrlManager
from shortlink.schemas import (
    ShortenRequest,
    ShortUrlDetail,
    ShortUrlOut,
    ShortUrlPage,
    UpdateUrlRequest,
)
from shortlink.storage.base import BaseSequenceAllocator, BaseStorage
from shortlink.storage.storage_factory import get_sequence_allocator, get_storage

# Most specific first: DuplicateCode is a StorageError.
ERROR_STATUS = (
    (NotFound, status.HTTP_404_NOT_FOUND),
    (Forbidden, status.HTTP_403_FORBIDDEN),
    (InvalidURL, status.HTTP_400_BAD_REQUEST),
    (InvalidCode, status.HTTP_400_BAD_REQUEST),
    (AllocationFailure, status.HTTP_503_SERVICE_UNAVAILABLE),
    (DuplicateCode, status.HTTP_500_INTERNAL_SERVER_ERROR),
    (StorageError, status.HTTP_503_SERVICE_UNAVAILABLE),
    (CapacityExceeded, status.HTTP_500_INTERNAL_SERVER_ERROR),
)


def status_for(exc: ShortlinkError) -> int:
    for exc_type, code in ERROR_STATUS:
        if isinstance(exc, exc_type):
            return code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def create_app(
    storage: Optional[BaseStorage] = None,
    allocator: Optional[BaseSequenceAllocator] = None,
) -> FastAPI:
    """
    Factory function to build and configure a new FastAPI app instance.

    Args:
        storage: Record store to use; defaults to the configured backend.
        allocator: Sequence allocator to use; defaults to the configured backend.

    Returns:
        FastAPI: A fully configured application instance with its own
                 services and analytics.
    """
    app = FastAPI(
        title="Shortlink",
        description="Sequence-based URL shortener with visit counting",
        docs_url="/docs",
    )
    log = logging.getLogger("shortlink.api")

    # basic console logging (optional)
    if not logging.getLogger().handlers:
        logging.basicConfig(
            level=settings.LOG_LEVEL,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )

    # ----------------------------------------------------------------
    # Per-app instances (isolated for tests, swappable for production)
    # ----------------------------------------------------------------
    storage = storage if storage is not None else get_storage()
    allocator = allocator if allocator is not None else get_sequence_allocator()
    analytics = Analytics()
    shortener = ShorteningService(allocator, storage, sequence_name=settings.SEQUENCE_NAME)
    redirector = RedirectService(storage, analytics=analytics)
    url_manager = UrlManager(storage, max_limit=settings.PAGE_LIMIT_MAX)

    log.info(
        "Shortlink ready: storage=%s allocator=%s sequence=%r",
        type(storage).__name__, type(allocator).__name__, settings.SEQUENCE_NAME,
    )

    @app.exception_handler(ShortlinkError)
    async def shortlink_error_handler(request: Request, exc: ShortlinkError) -> JSONResponse:
        code = status_for(exc)
        if code >= 500:
            log.error("%s %s failed: %s", request.method, request.url.path, exc)
        return JSONResponse(status_code=code, content={"detail": str(exc)})

    # ----------------------------------------------------------------
    # Utilities
    # ----------------------------------------------------------------
    def _detect_source(request: Request) -> str:
        """Classify the visit source as 'api' or 'browser' from request headers."""
        accept = request.headers.get("accept", "").lower()
        ua = request.headers.get("user-agent", "").lower()
        if "application/json" in accept or any(k in ua for k in ("python", "curl", "httpx", "httpclient")):
            return "api"
        return "browser"

    @app.get("/health")
    def health() -> Dict[str, Any]:
        return {"status": "ok", "backend": type(storage).__name__}

    # ----------------------------------------------------------------
    # Routes
    # ----------------------------------------------------------------
    @app.post("/api/urls/shorten", response_model=ShortUrlOut, status_code=status.HTTP_201_CREATED)
    def shorten_url(req: ShortenRequest, owner: Optional[str] = Depends(get_optional_user)) -> ShortUrlOut:
        """
        Create a short URL. Authenticated callers own the result and may
        later list, update or delete it.
        """
        record = shortener.shorten(req.url, owner_id=owner)
        return ShortUrlOut.from_record(record)

    @app.get("/api/urls", response_model=ShortUrlPage)
    def list_urls(
        page: int = Query(1, ge=1),
        limit: int = Query(10, ge=1),
        owner: str = Depends(get_current_user),
    ) -> ShortUrlPage:
        return ShortUrlPage.from_page(url_manager.list_for_owner(owner, page=page, limit=limit))

    @app.get("/api/urls/{url_id}", response_model=ShortUrlDetail)
    def get_url(url_id: str, owner: str = Depends(get_current_user)) -> ShortUrlDetail:
        record = url_manager.get_owned(url_id, owner)
        detail = ShortUrlDetail(**ShortUrlOut.from_record(record).model_dump())
        detail.sequence = codec.decode(record.code)
        return detail

    @app.patch("/api/urls/{url_id}", response_model=ShortUrlOut)
    def update_url(url_id: str, req: UpdateUrlRequest, owner: str = Depends(get_current_user)) -> ShortUrlOut:
        return ShortUrlOut.from_record(url_manager.update(url_id, owner, req.url))

    @app.delete("/api/urls/{url_id}", status_code=status.HTTP_204_NO_CONTENT)
    def delete_url(url_id: str, owner: str = Depends(get_current_user)) -> Response:
        url_manager.remove(url_id, owner)
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    @app.get("/analytics/summary")
    def analytics_summary(
        only_valid: bool = Query(False, description="Include only resolved visits."),
    ) -> Dict[str, Any]:
        return analytics.summary(only_valid=only_valid)

    # Catch-all redirect: must stay the last route registered.
    @app.get("/{short_code}")
    def redirect_short_code(short_code: str, request: Request, background_tasks: BackgroundTasks) -> Response:
        """
        Redirect to the destination of `short_code`.

        The visit count is incremented by a background task after the response
        is sent; a failed increment is logged and shows up in analytics.
        """
        url = redirector.resolve(
            short_code,
            schedule=background_tasks.add_task,
            source=_detect_source(request),
        )
        return RedirectResponse(url=url, status_code=status.HTTP_302_FOUND)

    app.state.storage = storage
    app.state.allocator = allocator
    app.state.analytics = analytics
    return app


# `uvicorn main:app --reload` and `from main import app` continue to work.
app = create_app()
