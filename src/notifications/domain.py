"""Notifications bounded context — preference-aware, real-time delivery.

Consumes state-change events from the Quality domain and from the order,
payment and chat collaborators, resolves each recipient's delivery policy,
persists one Notification per recipient, keeps the per-user unread counter
in step, and fans the notification out to live WebSocket connections and
the immediate email/SMS/push channels.
"""

import structlog
from protean.domain import Domain

notifications = Domain(name="notifications")

logger = structlog.get_logger(__name__)
