"""Health probes and the Prometheus scrape endpoint."""

from __future__ import annotations

import hmac
from typing import Any, Optional

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from fastapi.responses import JSONResponse
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from civichub.obs import health
from civichub.settings import settings

router = APIRouter(tags=["ops"])


def presented_ops_token(request: Request) -> Optional[str]:
	"""Ops token from `X-Admin-Token`, falling back to a bearer Authorization header."""
	token = request.headers.get("X-Admin-Token")
	if token:
		return token
	scheme, _, credentials = request.headers.get("Authorization", "").partition(" ")
	if scheme.lower() == "bearer" and credentials:
		return credentials
	return None


async def require_metrics_access(request: Request) -> None:
	if settings.obs_metrics_public:
		return
	expected = settings.obs_admin_token
	if not expected:
		raise HTTPException(status.HTTP_403_FORBIDDEN, detail="admin_token_not_configured")
	provided = presented_ops_token(request) or ""
	if not hmac.compare_digest(provided.encode(), expected.encode()):
		raise HTTPException(status.HTTP_403_FORBIDDEN, detail="forbidden")


@router.get("/health/live")
async def health_live() -> dict[str, Any]:
	return await health.liveness()


@router.get("/health/ready")
async def health_ready() -> JSONResponse:
	status_code, payload = await health.readiness()
	return JSONResponse(content=payload, status_code=status_code)


@router.get("/metrics", dependencies=[Depends(require_metrics_access)])
async def metrics_endpoint() -> Response:
	return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
