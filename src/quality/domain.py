"""Quality bounded context — content quality review workflow.

Owns the lifecycle of a quality check: intake of submitted content,
automated scoring, reviewer assignment, manual review and revision
cycles. Every transition is published as a domain event; the
Notifications domain consumes the reviewer-facing and submitter-facing
ones through the contracts in ``shared.events.quality``.
"""

import structlog
from protean.domain import Domain

quality = Domain(name="quality")

logger = structlog.get_logger(__name__)
