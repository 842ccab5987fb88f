"""SubmitRevision — the submitter answers a revision request.

Revision numbers start at 1 and grow by one per accepted revision. The
check goes back to UNDER_REVIEW with its previous reviewer, whose load is
taken again.
"""

from protean.fields import Identifier, Integer, Text
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from quality.check.quality_check import QualityCheck
from quality.domain import quality
from quality.reviewer.reviewer import Reviewer, find_reviewer


@quality.command(part_of="QualityCheck")
class SubmitRevision:
    quality_check_id = Identifier(required=True)
    submitted_by = Identifier(required=True)
    changes = Text()
    expected_version = Integer()


@quality.command_handler(part_of=QualityCheck)
class SubmitRevisionHandler:
    @handle(SubmitRevision)
    def submit_revision(self, command):
        repo = current_domain.repository_for(QualityCheck)
        check = repo.get(command.quality_check_id)
        check.assert_version(command.expected_version)

        check.submit_revision(command.submitted_by, command.changes)
        repo.add(check)

        if check.assigned_to:
            reviewer = find_reviewer(check.assigned_to)
            if reviewer is not None:
                reviewer.take_assignment()
                current_domain.repository_for(Reviewer).add(reviewer)

        return check.ordered_revisions()[-1].revision_number
