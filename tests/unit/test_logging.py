# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for logging setup and datetime helpers."""

import json
import logging
from datetime import datetime, timedelta, timezone

import pytest

from gradeledger.core.config import Settings
from gradeledger.utils.datetime import ensure_utc, format_iso
from gradeledger.utils.logging import bind_context, clear_context, get_logger, setup_logging


def json_lines(output: str) -> list[dict]:
    return [json.loads(line) for line in output.splitlines() if line.strip()]


@pytest.fixture
def json_settings() -> Settings:
    return Settings(environment="staging", debug=False, log_level="INFO")


class TestSetupLogging:
    """Tests for setup_logging()."""

    def test_stdlib_records_rendered_as_json(self, capsys, restore_logging, json_settings):
        setup_logging(json_settings)

        logging.getLogger("gradeledger.domains.enrollment").warning(
            "Refused %s on %s enrollment", "update", "verified"
        )

        record = json_lines(capsys.readouterr().out)[-1]
        assert record["event"] == "Refused update on verified enrollment"
        assert record["level"] == "warning"
        assert record["logger"] == "gradeledger.domains.enrollment"
        assert "timestamp" in record

    def test_structlog_key_values(self, capsys, restore_logging, json_settings):
        setup_logging(json_settings)

        get_logger("gradeledger.runtime").info("Starting gradeledger", environment="staging")

        record = json_lines(capsys.readouterr().out)[-1]
        assert record["event"] == "Starting gradeledger"
        assert record["environment"] == "staging"

    def test_bound_context_reaches_stdlib_records(self, capsys, restore_logging, json_settings):
        setup_logging(json_settings)
        bind_context(principal_id="7", principal_role="student")

        logging.getLogger("gradeledger.domains.auth").warning("Denied")
        clear_context()
        logging.getLogger("gradeledger.domains.auth").warning("Denied again")

        first, second = json_lines(capsys.readouterr().out)[-2:]
        assert first["principal_id"] == "7"
        assert first["principal_role"] == "student"
        assert "principal_id" not in second

    def test_level_filtering(self, capsys, restore_logging):
        setup_logging(Settings(environment="staging", debug=False, log_level="WARNING"))

        logging.getLogger("gradeledger.domains.catalog").info("Added course")

        assert capsys.readouterr().out == ""

    def test_repeated_setup_single_handler(self, capsys, restore_logging, json_settings):
        setup_logging(json_settings)
        setup_logging(json_settings)

        logging.getLogger("gradeledger.test").warning("Once")

        assert len(json_lines(capsys.readouterr().out)) == 1

    def test_development_console_output(self, capsys, restore_logging, settings):
        setup_logging(settings)

        logging.getLogger("gradeledger.test").info("Readable line")

        output = capsys.readouterr().out
        assert "Readable line" in output
        assert not output.lstrip().startswith("{")


class TestDatetimeHelpers:
    """Tests for UTC helpers."""

    def test_naive_assumed_utc(self):
        naive = datetime(2025, 1, 15, 10, 30)

        assert ensure_utc(naive) == datetime(2025, 1, 15, 10, 30, tzinfo=timezone.utc)

    def test_aware_converted(self):
        ist = timezone(timedelta(hours=5, minutes=30))

        converted = ensure_utc(datetime(2025, 1, 15, 16, 0, tzinfo=ist))

        assert converted.tzinfo == timezone.utc
        assert converted.hour == 10

    def test_format_iso(self):
        assert format_iso(None) is None
        assert format_iso(datetime(2025, 1, 15, 10, 30)) == "2025-01-15T10:30:00+00:00"
