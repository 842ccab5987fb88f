"""AssignReviewer — route a pending check to the least-loaded reviewer."""

import structlog
from protean.fields import Identifier, Integer
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from quality.check.quality_check import QualityCheck
from quality.domain import quality
from quality.reviewer.reviewer import Reviewer, pick_least_loaded_reviewer

logger = structlog.get_logger(__name__)


@quality.command(part_of="QualityCheck")
class AssignReviewer:
    quality_check_id = Identifier(required=True)
    expected_version = Integer()


@quality.command_handler(part_of=QualityCheck)
class AssignReviewerHandler:
    @handle(AssignReviewer)
    def assign_reviewer(self, command):
        repo = current_domain.repository_for(QualityCheck)
        check = repo.get(command.quality_check_id)
        check.assert_version(command.expected_version)

        reviewer = pick_least_loaded_reviewer()
        check.assign(reviewer.user_id)
        reviewer.take_assignment()

        repo.add(check)
        current_domain.repository_for(Reviewer).add(reviewer)

        logger.info(
            "reviewer_assigned",
            quality_check_id=str(check.id),
            reviewer_id=str(reviewer.user_id),
            active_reviews=reviewer.active_reviews,
        )
        return str(reviewer.user_id)
