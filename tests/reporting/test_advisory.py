# tests/reporting/test_advisory.py

import logging

import pytest

from cohort_model.projections.runner import project
from cohort_model.reporting.advisory import (
    EMPTY_RESPONSE_FALLBACK,
    ERROR_FALLBACK,
    format_advisory_prompt,
    request_advisory,
)


@pytest.fixture
def record(reference, baseline_params):
    return project(2024, 2026, baseline_params, reference)[-1]


def test_prompt_mentions_year_and_parameters(record, baseline_params):
    prompt = format_advisory_prompt(record, baseline_params)
    assert "2026" in prompt
    assert "Retirement Age: 66" in prompt
    assert "Net Migration: 110,000" in prompt
    assert "Sustainability Index" in prompt
    assert "3 bullet points" in prompt


def test_client_receives_prompt_and_text_is_returned(record, baseline_params):
    seen = []

    def client(prompt):
        seen.append(prompt)
        return "Outlook is tight."

    assert request_advisory(record, baseline_params, client) == "Outlook is tight."
    assert seen == [format_advisory_prompt(record, baseline_params)]


@pytest.mark.parametrize("response", ["", None])
def test_empty_response_fallback(record, baseline_params, response):
    assert request_advisory(record, baseline_params, lambda prompt: response) == EMPTY_RESPONSE_FALLBACK


def test_client_error_fallback_is_logged(record, baseline_params, caplog):
    def failing(prompt):
        raise ConnectionError("service down")

    with caplog.at_level(logging.WARNING, logger="cohort_model.reporting.advisory"):
        text = request_advisory(record, baseline_params, failing)
    assert text == ERROR_FALLBACK == "Analysis unavailable due to API error."
    assert "service down" in caplog.text
