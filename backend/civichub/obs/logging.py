"""JSON log lines carrying the request context of the civic API."""

from __future__ import annotations

import json
import logging
import random
from contextvars import ContextVar, Token
from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional

from civichub.settings import settings

CONTEXT_FIELDS = ("request_id", "route", "user_id", "client_ip")

_CONTEXT: ContextVar[Mapping[str, str]] = ContextVar("civic_log_context", default={})

# profile contact fields are personal data and never reach the log sink
_REDACTED_MARKERS = (
	"token",
	"secret",
	"authorization",
	"password",
	"api_key",
	"email",
	"phone",
	"address",
	"zip_code",
)

_MAX_TEXT = 256
_MAX_ITEMS = 10

_STANDARD_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", None, None))) | {"message", "asctime", "taskName"}


def bind_context(**fields: Optional[str]) -> Token:
	"""Merge request fields into the log context; unknown keys and None values are ignored."""
	merged = dict(_CONTEXT.get())
	merged.update({key: str(value) for key, value in fields.items() if key in CONTEXT_FIELDS and value is not None})
	return _CONTEXT.set(merged)


def reset_context(token: Token) -> None:
	_CONTEXT.reset(token)


def current_request_id() -> Optional[str]:
	return _CONTEXT.get().get("request_id")


def scrub(key: str, value: Any) -> Any:
	"""Redact sensitive keys and bound the size of anything else."""
	if any(marker in key.lower() for marker in _REDACTED_MARKERS):
		return "[redacted]"
	if isinstance(value, str):
		return value if len(value) <= _MAX_TEXT else value[:_MAX_TEXT] + "..."
	if isinstance(value, Mapping):
		return {str(nested_key): scrub(str(nested_key), nested) for nested_key, nested in list(value.items())[:_MAX_ITEMS]}
	if isinstance(value, (list, tuple, set)):
		return [scrub(key, item) for item in list(value)[:_MAX_ITEMS]]
	if isinstance(value, (int, float, bool)) or value is None:
		return value
	return str(value)


class JSONLogFormatter(logging.Formatter):
	def format(self, record: logging.LogRecord) -> str:  # noqa: A003 (match logging api)
		payload: Dict[str, Any] = {
			"ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
			"level": record.levelname.lower(),
			"logger": record.name,
			"msg": record.getMessage(),
			"service": settings.service_name,
			"env": settings.environment,
			"commit": settings.git_commit,
		}
		payload.update(_CONTEXT.get())
		for key, value in vars(record).items():
			if key in _STANDARD_ATTRS or key in payload:
				continue
			payload[key] = scrub(key, value)
		if record.exc_info:
			payload["exc_info"] = self.formatException(record.exc_info)
		return json.dumps(payload, separators=(",", ":"), default=str)


class InfoSamplingFilter(logging.Filter):
	"""Keep a share of info records; warnings and errors always pass."""

	def __init__(self, rate: float) -> None:
		super().__init__()
		self.rate = max(0.0, min(1.0, rate))

	def filter(self, record: logging.LogRecord) -> bool:  # noqa: A003
		if record.levelno != logging.INFO or self.rate >= 1.0:
			return True
		return random.random() < self.rate


def configure_logging() -> None:
	"""Route the root logger through one JSON handler at the configured level."""
	handler = logging.StreamHandler()
	handler.setFormatter(JSONLogFormatter())
	handler.addFilter(InfoSamplingFilter(settings.obs_log_sampling_rate_info))
	root = logging.getLogger()
	root.handlers.clear()
	root.addHandler(handler)
	root.setLevel(settings.obs_log_level)
