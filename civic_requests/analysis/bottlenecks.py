"""Bottleneck summary requests against an external text-generation service.

The raw uploaded text is passed through untouched and the reply is returned as
prose; nothing here feeds back into the metrics pipeline.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass

from civic_requests.common.config_loader import AnalysisConfig
from civic_requests.common.errors import AnalysisServiceError
from civic_requests.common.http import HttpClient, HttpRequestError, RetryConfig, TimeoutConfig

logger = logging.getLogger(__name__)

INVALID_INPUT_MESSAGE = "Invalid input data."
NOT_CONFIGURED_MESSAGE = "The AI service is not configured. Please check the server configuration."
UNEXPECTED_MESSAGE = "An unexpected error occurred while analyzing the data."

DATA_DESCRIPTION = (
    "A CSV or JSON string containing 311 service request data. The data should include fields such as "
    "request type, creation date, resolution date, and any other relevant information."
)

PROMPT_TEMPLATE = """You are an expert city operations analyst tasked with identifying bottlenecks in 311 service request data.

Analyze the following 311 service request data to identify common causes for delays in resolving specific types of requests. Provide a detailed analysis of the bottlenecks, including specific examples from the data.

Data description: {description}

Data: {data}

Consider factors such as request volume, resolution times, and request types.
Focus on identifying actionable insights that can help improve the efficiency of city services.
Your analysis should be clear, concise, and easy to understand for a city manager.
"""


@dataclass(frozen=True)
class AnalysisOutcome:
    analysis: str | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def build_prompt(raw_text: str, description: str = DATA_DESCRIPTION) -> str:
    return PROMPT_TEMPLATE.format(description=description, data=raw_text)


def _auth_headers(config: AnalysisConfig) -> dict[str, str]:
    if not config.api_key_env:
        return {}
    api_key = os.environ.get(config.api_key_env)
    if not api_key:
        raise AnalysisServiceError(NOT_CONFIGURED_MESSAGE)
    return {"Authorization": f"Bearer {api_key}"}


def request_bottleneck_analysis(
    raw_text: str,
    config: AnalysisConfig,
    *,
    client: HttpClient | None = None,
    description: str = DATA_DESCRIPTION,
) -> str:
    if not isinstance(raw_text, str) or not raw_text.strip():
        raise AnalysisServiceError(INVALID_INPUT_MESSAGE)
    if not config.enabled or not config.endpoint or not config.model:
        raise AnalysisServiceError(NOT_CONFIGURED_MESSAGE)

    headers = _auth_headers(config)
    payload = {
        "model": config.model,
        "prompt": build_prompt(raw_text, description),
        "stream": False,
    }
    timeout = TimeoutConfig(connect=config.connect_timeout_seconds, read=config.timeout_seconds)

    owns_client = client is None
    http = client or HttpClient(timeout=timeout, retry=RetryConfig(max_attempts=1))
    try:
        response = http.post_json(config.endpoint, payload=payload, headers=headers, timeout=timeout)
    except HttpRequestError as exc:
        logger.warning("analysis request failed: %s", exc, extra={"error_code": exc.error_code})
        if exc.status_code in (401, 403):
            raise AnalysisServiceError(NOT_CONFIGURED_MESSAGE) from exc
        raise AnalysisServiceError(UNEXPECTED_MESSAGE) from exc
    finally:
        if owns_client:
            http.close()

    analysis = response.get(config.response_field) if isinstance(response, dict) else None
    if not isinstance(analysis, str) or not analysis.strip():
        logger.warning("analysis response missing field %s", config.response_field)
        raise AnalysisServiceError(UNEXPECTED_MESSAGE)
    return analysis.strip()


def get_bottleneck_analysis(
    raw_text: str,
    config: AnalysisConfig,
    *,
    client: HttpClient | None = None,
) -> AnalysisOutcome:
    """Run the request and fold any failure into a user-facing message."""
    try:
        return AnalysisOutcome(analysis=request_bottleneck_analysis(raw_text, config, client=client))
    except AnalysisServiceError as exc:
        return AnalysisOutcome(error=str(exc))
