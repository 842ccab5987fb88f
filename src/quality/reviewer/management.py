"""Reviewer roster commands: registration and availability."""

from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import Boolean, Identifier, String
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from quality.domain import quality
from quality.reviewer.reviewer import Reviewer, find_reviewer


@quality.command(part_of="Reviewer")
class RegisterReviewer:
    user_id = Identifier(required=True)
    name = String(required=True, max_length=100)


@quality.command(part_of="Reviewer")
class SetReviewerAvailability:
    user_id = Identifier(required=True)
    is_active = Boolean(required=True)


@quality.command_handler(part_of=Reviewer)
class ReviewerRosterHandler:
    @handle(RegisterReviewer)
    def register_reviewer(self, command):
        if find_reviewer(command.user_id) is not None:
            raise ValidationError({"user_id": [f"User {command.user_id} is already a reviewer"]})

        reviewer = Reviewer.register(user_id=command.user_id, name=command.name)
        current_domain.repository_for(Reviewer).add(reviewer)
        return str(reviewer.id)

    @handle(SetReviewerAvailability)
    def set_availability(self, command):
        reviewer = find_reviewer(command.user_id)
        if reviewer is None:
            raise ObjectNotFoundError({"user_id": [f"Reviewer {command.user_id} does not exist"]})

        reviewer.set_availability(command.is_active)
        current_domain.repository_for(Reviewer).add(reviewer)
