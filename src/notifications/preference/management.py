"""UpdatePreferences — save a user's whole preference document.

The first save creates the record; later saves replace it atomically.
"""

import json

from notifications.domain import notifications
from notifications.preference.preference import NotificationPreference, find_preferences
from protean.exceptions import ValidationError
from protean.fields import Identifier, Text
from protean.utils.globals import current_domain
from protean.utils.mixins import handle


@notifications.command(part_of="NotificationPreference")
class UpdatePreferences:
    """Replace a user's notification preferences."""

    user_id: Identifier(required=True)
    document: Text(required=True)  # JSON preference document


@notifications.command_handler(part_of=NotificationPreference)
class ManagePreferencesHandler:
    @handle(UpdatePreferences)
    def update_preferences(self, command: UpdatePreferences):
        try:
            document = json.loads(command.document)
        except (TypeError, ValueError):
            raise ValidationError({"preferences": ["Preferences must be valid JSON"]}) from None

        repo = current_domain.repository_for(NotificationPreference)
        preference = find_preferences(command.user_id) or NotificationPreference.defaults_for(command.user_id)
        preference.replace(document)
        repo.add(preference)
        return preference.to_document()
