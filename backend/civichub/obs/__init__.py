"""Observability wiring for the civic API: JSON logging plus request middleware."""

from __future__ import annotations

from fastapi import FastAPI

from civichub.obs import logging as obs_logging
from civichub.obs import middleware
from civichub.settings import settings


def init(app: FastAPI) -> None:
	"""Install logging and middleware once per app; a no-op when observability is disabled."""
	if not settings.obs_enabled or getattr(app.state, "obs_installed", False):
		return
	obs_logging.configure_logging()
	middleware.install(app)
	app.state.obs_installed = True


__all__ = ["init"]
