"""Request middleware: request ids, log context, access logs and HTTP metrics."""

from __future__ import annotations

import logging
import time
from uuid import uuid4

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

from civichub.obs import logging as obs_logging
from civichub.obs import metrics

logger = logging.getLogger("civichub.http")

REQUEST_ID_HEADER = "X-Request-Id"

# probes and scrapes are counted but not access-logged
_QUIET_PATHS = frozenset({"/health/live", "/health/ready", "/metrics"})


def _route_template(request: Request) -> str:
	route = request.scope.get("route")
	return getattr(route, "path", None) or request.url.path


class ObservabilityMiddleware(BaseHTTPMiddleware):
	async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
		request_id = request.headers.get(REQUEST_ID_HEADER) or uuid4().hex
		request.state.request_id = request_id
		client_ip = request.client.host if request.client else None
		token = obs_logging.bind_context(request_id=request_id, route=request.url.path, client_ip=client_ip)
		start = time.perf_counter()
		status_code = 500
		try:
			response = await call_next(request)
			status_code = response.status_code
		except Exception:
			logger.exception("http_request_error", extra={"method": request.method})
			raise
		else:
			response.headers.setdefault(REQUEST_ID_HEADER, request_id)
			return response
		finally:
			elapsed = time.perf_counter() - start
			route = _route_template(request)
			metrics.observe_request(route, request.method, status_code, elapsed)
			if request.url.path not in _QUIET_PATHS:
				logger.info(
					"http_request",
					extra={
						"method": request.method,
						"status": status_code,
						"route_template": route,
						"latency_ms": round(elapsed * 1000, 3),
					},
				)
			obs_logging.reset_context(token)


def install(app) -> None:
	app.add_middleware(ObservabilityMiddleware)
