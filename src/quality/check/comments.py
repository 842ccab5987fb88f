"""AddComment — append a remark to a quality check in any status."""

from protean.fields import Identifier, Integer, Text
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from quality.check.quality_check import QualityCheck
from quality.domain import quality


@quality.command(part_of="QualityCheck")
class AddComment:
    quality_check_id = Identifier(required=True)
    author_id = Identifier(required=True)
    text = Text(required=True)
    expected_version = Integer()


@quality.command_handler(part_of=QualityCheck)
class AddCommentHandler:
    @handle(AddComment)
    def add_comment(self, command):
        repo = current_domain.repository_for(QualityCheck)
        check = repo.get(command.quality_check_id)
        check.assert_version(command.expected_version)

        check.add_comment(command.author_id, command.text)
        repo.add(check)
