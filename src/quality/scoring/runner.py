"""Job runner for the automated checks.

Scoring may be delegated to an external scorer (a crawler, a plagiarism
service) and so is run in a worker thread with a timeout. A transient
failure or a timeout is retried once; after that the run is reported as
unavailable and the caller keeps its previous snapshot.
"""

import os
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeout
from typing import Callable

import structlog

from quality.scoring.aggregator import SubmittedContent, score_content
from quality.scoring.config import ScoringConfig

logger = structlog.get_logger(__name__)

DEFAULT_TIMEOUT = 30.0
DEFAULT_RETRIES = 1


class TransientScoringError(Exception):
    """A scorer failure worth retrying (network hiccup, upstream 5xx)."""


class AutomatedChecksUnavailable(Exception):
    """The automated checks could not be produced after all attempts."""

    def __init__(self, reason: str, attempts: int):
        super().__init__(reason)
        self.reason = reason
        self.attempts = attempts


Scorer = Callable[[SubmittedContent, ScoringConfig], dict]


class AutomatedCheckRunner:
    def __init__(
        self,
        scorer: Scorer | None = None,
        timeout: float | None = None,
        retries: int = DEFAULT_RETRIES,
        config: ScoringConfig | None = None,
    ):
        self.scorer = scorer or score_content
        self.timeout = timeout if timeout is not None else float(
            os.getenv("QUALITY_SCORING_TIMEOUT", DEFAULT_TIMEOUT)
        )
        self.retries = retries
        self.config = config or ScoringConfig.from_env()

    def run(self, content: SubmittedContent) -> dict:
        attempts = self.retries + 1
        reason = "unknown"

        for attempt in range(1, attempts + 1):
            executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="quality-scoring")
            try:
                future = executor.submit(self.scorer, content, self.config)
                return future.result(timeout=self.timeout)
            except FutureTimeout:
                reason = f"timed out after {self.timeout}s"
            except TransientScoringError as exc:
                reason = str(exc) or "transient scorer failure"
            finally:
                # A timed-out worker is abandoned, not joined
                executor.shutdown(wait=False)

            logger.warning(
                "automated_checks_attempt_failed",
                attempt=attempt,
                attempts=attempts,
                reason=reason,
            )

        raise AutomatedChecksUnavailable(reason, attempts)


_runner: AutomatedCheckRunner | None = None


def get_runner() -> AutomatedCheckRunner:
    global _runner
    if _runner is None:
        _runner = AutomatedCheckRunner()
    return _runner


def configure_runner(runner: AutomatedCheckRunner) -> None:
    global _runner
    _runner = runner


def reset_runner() -> None:
    global _runner
    _runner = None
