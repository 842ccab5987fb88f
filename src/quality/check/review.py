"""StartManualReview / CompleteManualReview — the manual review cycle.

Completing a review releases the assigned reviewer's load, whatever the
verdict.
"""

from protean.fields import Identifier, Integer, String, Text
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from quality.check.quality_check import QualityCheck
from quality.domain import quality
from quality.reviewer.reviewer import Reviewer, find_reviewer


@quality.command(part_of="QualityCheck")
class StartManualReview:
    quality_check_id = Identifier(required=True)
    expected_version = Integer()


@quality.command(part_of="QualityCheck")
class CompleteManualReview:
    quality_check_id = Identifier(required=True)
    verdict = String(required=True)  # approved | rejected | needs_revision
    comments = Text()
    expected_version = Integer()


@quality.command_handler(part_of=QualityCheck)
class ManualReviewHandler:
    @handle(StartManualReview)
    def start_manual_review(self, command):
        repo = current_domain.repository_for(QualityCheck)
        check = repo.get(command.quality_check_id)
        check.assert_version(command.expected_version)

        check.start_review()
        repo.add(check)

    @handle(CompleteManualReview)
    def complete_manual_review(self, command):
        repo = current_domain.repository_for(QualityCheck)
        check = repo.get(command.quality_check_id)
        check.assert_version(command.expected_version)

        check.complete_review(command.verdict, command.comments)
        repo.add(check)

        if check.assigned_to:
            reviewer = find_reviewer(check.assigned_to)
            if reviewer is not None:
                reviewer.release_assignment()
                current_domain.repository_for(Reviewer).add(reviewer)

        return check.status
