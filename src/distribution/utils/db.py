"""Schema management for relational providers (PostgreSQL in production, SQLite locally)."""

import structlog
from protean.domain import Domain
from sqlalchemy import create_engine

logger = structlog.get_logger(__name__)

_RELATIONAL_PROVIDERS = ("sqlite", "postgresql")


def _relational_providers(domain: Domain):
    for _, provider in domain.providers.items():
        if provider.conn_info["provider"] in _RELATIONAL_PROVIDERS:
            yield provider


def _register_models(domain: Domain, provider) -> None:
    """Touch every repository's DAO so SQLAlchemy knows about the tables.

    Models are built lazily on first DAO access, so ``create_all`` would miss
    any aggregate or entity that has not been used yet.
    """
    records = list(domain.registry.aggregates.items()) + list(domain.registry.entities.items())
    for _, record in records:
        if record.cls.meta_.provider == provider.name:
            domain.repository_for(record.cls)._dao  # noqa: B018


def setup_db(domain: Domain) -> None:
    """Create tables for every relational provider."""
    with domain.domain_context():
        for provider in _relational_providers(domain):
            engine = create_engine(provider.conn_info["database_uri"])
            _register_models(domain, provider)
            provider._metadata.create_all(engine)
            logger.info("Schema created", provider=provider.name)


def drop_db(domain: Domain) -> None:
    """Drop tables for every relational provider."""
    with domain.domain_context():
        for provider in _relational_providers(domain):
            engine = create_engine(provider.conn_info["database_uri"])
            _register_models(domain, provider)
            provider._metadata.drop_all(engine)
            logger.info("Schema dropped", provider=provider.name)
