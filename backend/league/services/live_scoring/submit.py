"""Final-score submitters used by the live scoring session.

A submitter is any callable ``(match_id, score_a, score_b) -> SubmitResult``.
Failures come back as a message fit for showing to the operator; they are
never raised.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

import requests

logger = logging.getLogger(__name__)

DEFAULT_ERROR = "Failed to submit score"


@dataclass(frozen=True)
class SubmitResult:
    success: bool
    message: Optional[str] = None

    @staticmethod
    def ok() -> "SubmitResult":
        return SubmitResult(success=True)

    @staticmethod
    def failed(message: Optional[str]) -> "SubmitResult":
        return SubmitResult(success=False, message=message or DEFAULT_ERROR)


class ServiceScoreSubmitter:
    """Submits straight into the aggregation service of a Flask app."""

    def __init__(self, app):
        self.app = app

    def __call__(self, match_id: int, score_a: int, score_b: int) -> SubmitResult:
        from league.services.matches.aggregation import AggregationError, submit_score

        with self.app.app_context():
            try:
                submit_score(match_id, score_a, score_b)
            except AggregationError as exc:
                return SubmitResult.failed(str(exc))
        return SubmitResult.ok()


class HttpScoreSubmitter:
    """Posts the final score to ``POST /api/matches/<id>/score``."""

    def __init__(self, base_url: str, timeout: float = 10, session=None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def __call__(self, match_id: int, score_a: int, score_b: int) -> SubmitResult:
        url = f"{self.base_url}/api/matches/{match_id}/score"
        try:
            response = self.session.post(
                url, json={"scoreA": score_a, "scoreB": score_b}, timeout=self.timeout
            )
        except requests.exceptions.Timeout:
            logger.error(f"[submit] timeout match={match_id} url={url}")
            return SubmitResult.failed("The server took too long to respond. Please try again.")
        except requests.exceptions.RequestException as exc:
            logger.error(f"[submit] request failed match={match_id}: {exc}")
            return SubmitResult.failed("Could not reach the server. Check your connection and try again.")

        if response.status_code == 200:
            logger.info(f"[submit] match={match_id} score={score_a}-{score_b} accepted")
            return SubmitResult.ok()

        try:
            payload = response.json()
        except ValueError:
            payload = None
        message = payload.get("error") if isinstance(payload, dict) else None
        logger.error(f"[submit] match={match_id} rejected status={response.status_code} error={message}")
        return SubmitResult.failed(message)
