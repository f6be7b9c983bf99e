"""
app/api/routers/image_proxy.py

Relays remote product images so the browser never hits the shop directly.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from app.errors import TransportError, UpstreamStatusError
from app.services.image_relay_service import ImageRelayService, get_image_relay_service

router = APIRouter(tags=["image-proxy"])


@router.get("/image-proxy")
def image_proxy(
    url: str | None = Query(default=None, description="Absolute image URL"),
    relay_service: ImageRelayService = Depends(get_image_relay_service),
) -> Response:
    """
    Return the image bytes with a long-lived cache header.

    400 without a usable URL, the upstream status on a non-2xx answer and
    502 when the upstream cannot be reached.
    """

    if not url or not url.strip():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Image URL is required")

    try:
        asset = relay_service.fetch(url.strip())
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except UpstreamStatusError as exc:
        raise HTTPException(
            status_code=exc.status_code,
            detail=f"Failed to fetch image: upstream status {exc.status_code}",
        ) from exc
    except TransportError as exc:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)) from exc

    return Response(
        content=asset.content,
        media_type=asset.content_type,
        headers={"Cache-Control": relay_service.cache_control},
    )
