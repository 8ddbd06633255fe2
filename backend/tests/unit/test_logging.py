from __future__ import annotations

import json
import logging

from clubhub.obs import logging as obs_logging
from clubhub.settings import settings


def _record(name: str = "clubhub.http", level: int = logging.INFO, **extra) -> logging.LogRecord:
	record = logging.LogRecord(name, level, __file__, 1, "http_request", None, None)
	record.__dict__.update(extra)
	return record


def test_formatter_stamps_request_context_and_redacts():
	formatter = obs_logging.JSONLogFormatter()
	tokens = obs_logging.bind_context(request_id="req-42", user_id="user-7", client_ip=None)
	try:
		line = formatter.format(
			_record(
				status=201,
				whatsapp_link="https://chat.whatsapp.com/abc",
				audit={"club_id": "c-1", "email": "head@campus.edu"},
			)
		)
	finally:
		obs_logging.reset_context(tokens)

	payload = json.loads(line)
	assert payload["msg"] == "http_request"
	assert payload["request_id"] == "req-42"
	assert payload["user_id"] == "user-7"
	assert "client_ip" not in payload
	assert payload["status"] == 201
	assert payload["whatsapp_link"] == "[redacted]"
	assert payload["audit"] == {"club_id": "c-1", "email": "[redacted]"}

	after = json.loads(formatter.format(_record()))
	assert "request_id" not in after
	assert obs_logging.current_request_id() is None


def test_long_strings_are_shortened():
	value = obs_logging.redact("description", "x" * 300)
	assert len(value) == 259
	assert value.endswith("...")


def test_sampling_never_drops_audit_records(monkeypatch):
	monkeypatch.setattr(settings, "obs_log_sampling_rate_info", 0.0)
	sampler = obs_logging.InfoSamplingFilter()

	assert sampler.filter(_record("clubhub.http")) is False
	assert sampler.filter(_record(obs_logging.AUDIT_LOGGER)) is True
	assert sampler.filter(_record("clubhub.http", logging.WARNING)) is True
