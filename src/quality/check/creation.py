"""CreateQualityCheck — open a quality check for submitted content.

Called by the order/content-submission collaborator once content for an
order is delivered. The check starts in PENDING.
"""

import json

from protean.fields import DateTime, Identifier, String, Text
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from quality.check.quality_check import QualityCheck
from quality.domain import quality


@quality.command(part_of="QualityCheck")
class CreateQualityCheck:
    order_id = Identifier(required=True)
    website_id = Identifier(required=True)
    submitted_by = Identifier(required=True)
    title = String(max_length=255)
    priority = String()
    deadline = DateTime()
    tags = Text()  # JSON list of strings


@quality.command_handler(part_of=QualityCheck)
class CreateQualityCheckHandler:
    @handle(CreateQualityCheck)
    def create_quality_check(self, command):
        check = QualityCheck.create(
            order_id=command.order_id,
            website_id=command.website_id,
            submitted_by=command.submitted_by,
            title=command.title,
            priority=command.priority,
            deadline=command.deadline,
            tags=json.loads(command.tags) if command.tags else None,
        )
        current_domain.repository_for(QualityCheck).add(check)
        return str(check.id)
