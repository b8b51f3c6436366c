"""Prometheus text exposition of the in-process metrics registry."""

from fastapi import APIRouter, Response

from app.monitoring.registry import registry


router = APIRouter(tags=["metrics"])

CONTENT_TYPE = "text/plain; version=0.0.4; charset=utf-8"


@router.get("/metrics", response_class=Response)
def export_metrics() -> Response:
    """Render relay, voice room and translation metrics for scraping."""

    return Response(content=registry.render(), media_type=CONTENT_TYPE)
