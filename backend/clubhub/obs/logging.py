"""JSON logging for the clubs API.

Request-scoped fields are kept in context variables bound by the HTTP
middleware and stamped on every record emitted while the request runs.
"""

from __future__ import annotations

import json
import logging
import random
import re
from contextvars import ContextVar, Token
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from clubhub.settings import settings

ROOT_LOGGER = "clubhub"
AUDIT_LOGGER = "clubhub.audit"

_CONTEXT: Dict[str, ContextVar[Optional[str]]] = {
	name: ContextVar(f"clubhub_log_{name}", default=None) for name in ("request_id", "user_id", "client_ip")
}

_REDACTED_KEYS = re.compile(r"token|secret|authorization|password|email|whatsapp", re.IGNORECASE)
_MAX_STRING = 256

_STANDARD_ATTRS = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime"}

ContextTokens = List[Tuple[ContextVar, Token]]


def bind_context(**fields: Optional[str]) -> ContextTokens:
	"""Bind non-empty request fields; pass the result to :func:`reset_context`."""
	tokens: ContextTokens = []
	for name, value in fields.items():
		if value is None:
			continue
		var = _CONTEXT[name]
		tokens.append((var, var.set(value)))
	return tokens


def reset_context(tokens: ContextTokens) -> None:
	for var, token in reversed(tokens):
		var.reset(token)


def current_request_id() -> Optional[str]:
	return _CONTEXT["request_id"].get()


def redact(key: str, value: Any) -> Any:
	"""Mask credential and contact fields, shorten long strings."""
	if _REDACTED_KEYS.search(key):
		return "[redacted]"
	if isinstance(value, dict):
		return {str(k): redact(str(k), v) for k, v in value.items()}
	if isinstance(value, str):
		return value if len(value) <= _MAX_STRING else value[:_MAX_STRING] + "..."
	if value is None or isinstance(value, (bool, int, float)):
		return value
	return str(value)


class JSONLogFormatter(logging.Formatter):
	def format(self, record: logging.LogRecord) -> str:  # noqa: A003
		payload: Dict[str, Any] = {
			"ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
			"level": record.levelname.lower(),
			"msg": record.getMessage(),
			"logger": record.name,
			"service": settings.service_name,
			"env": settings.environment,
			"commit": settings.git_commit,
		}
		for name, var in _CONTEXT.items():
			value = var.get()
			if value:
				payload[name] = value
		if record.exc_info:
			payload["exc_info"] = self.formatException(record.exc_info)
		for key, value in record.__dict__.items():
			if key not in _STANDARD_ATTRS and key not in payload:
				payload[key] = redact(key, value)
		return json.dumps(payload, separators=(",", ":"))


class InfoSamplingFilter(logging.Filter):
	"""Sample INFO records at ``LOG_SAMPLING_RATE_INFO``. Audit records always pass."""

	def filter(self, record: logging.LogRecord) -> bool:  # noqa: A003
		if record.levelno != logging.INFO or record.name.startswith(AUDIT_LOGGER):
			return True
		return random.random() < settings.obs_log_sampling_rate_info


def configure_logging() -> logging.Logger:
	root = logging.getLogger()
	root.handlers.clear()
	handler = logging.StreamHandler()
	handler.setFormatter(JSONLogFormatter())
	handler.addFilter(InfoSamplingFilter())
	root.addHandler(handler)
	root.setLevel(settings.obs_log_level)
	return logging.getLogger(ROOT_LOGGER)


def get_logger(name: Optional[str] = None) -> logging.Logger:
	return logging.getLogger(name or ROOT_LOGGER)
