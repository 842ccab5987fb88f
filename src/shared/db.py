"""Relational schema management for the Quality and Notifications domains.

Only providers backed by an RDBMS are touched; the in-memory provider used
in development and tests needs no schema.
"""

import structlog
from protean.domain import Domain
from sqlalchemy import create_engine

logger = structlog.get_logger(__name__)

RDBMS_PROVIDERS = ("sqlite", "postgresql")


def _register_models(domain: Domain, provider) -> None:
    """Touch every repository DAO so that its table is known to SQLAlchemy."""
    registries = (
        domain.registry.aggregates,
        domain.registry.entities,
        domain.registry.projections,
    )
    for registry in registries:
        for _, record in registry.items():
            if record.cls.meta_.provider == provider.name:
                domain.repository_for(record.cls)._dao  # noqa: B018


def setup_db(domain: Domain) -> int:
    """Create the tables of every relational provider. Returns how many were set up."""
    created = 0
    with domain.domain_context():
        for name, provider in domain.providers.items():
            if provider.conn_info["provider"] not in RDBMS_PROVIDERS:
                continue
            engine = create_engine(provider.conn_info["database_uri"])
            _register_models(domain, provider)
            provider._metadata.create_all(engine)
            logger.info("schema_created", domain=domain.name, provider=name)
            created += 1
    return created


def drop_db(domain: Domain) -> int:
    """Drop the tables of every relational provider."""
    dropped = 0
    with domain.domain_context():
        for name, provider in domain.providers.items():
            if provider.conn_info["provider"] not in RDBMS_PROVIDERS:
                continue
            engine = create_engine(provider.conn_info["database_uri"])
            provider._metadata.drop_all(engine)
            logger.info("schema_dropped", domain=domain.name, provider=name)
            dropped += 1
    return dropped
