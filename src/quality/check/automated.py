"""RunAutomatedChecks — score submitted content and store the snapshot.

The scoring job runs through the automated check runner (timeout and one
retry). When the job gives up, the previous snapshot is kept and an
``AutomatedChecksFailed`` event is raised instead; the command itself
succeeds either way.
"""

import json

import structlog
from protean.fields import Identifier, Integer, Text
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from quality.check.quality_check import QualityCheck
from quality.domain import quality
from quality.scoring.aggregator import SubmittedContent
from quality.scoring.runner import AutomatedChecksUnavailable, get_runner

logger = structlog.get_logger(__name__)


@quality.command(part_of="QualityCheck")
class RunAutomatedChecks:
    quality_check_id = Identifier(required=True)
    content = Text(required=True)
    metadata = Text()  # JSON: references, site_domain, link_status
    expected_version = Integer()


@quality.command_handler(part_of=QualityCheck)
class RunAutomatedChecksHandler:
    @handle(RunAutomatedChecks)
    def run_automated_checks(self, command):
        repo = current_domain.repository_for(QualityCheck)
        check = repo.get(command.quality_check_id)
        check.assert_version(command.expected_version)

        content = SubmittedContent(
            text=command.content,
            metadata=json.loads(command.metadata) if command.metadata else {},
        )

        try:
            result = get_runner().run(content)
        except AutomatedChecksUnavailable as exc:
            logger.error(
                "automated_checks_unavailable",
                quality_check_id=str(check.id),
                reason=exc.reason,
                attempts=exc.attempts,
            )
            check.record_automated_checks_failure(exc.reason, exc.attempts)
            repo.add(check)
            return None

        check.record_automated_checks(result)
        repo.add(check)

        logger.info(
            "automated_checks_completed",
            quality_check_id=str(check.id),
            overall_passed=result["overall_passed"],
        )
        return check.automated_result
