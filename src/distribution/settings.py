"""Deployment settings read from the ``[custom]`` section of ``domain.toml``.

The fulfillment workflow lineage and the stock commit policy are explicit
configuration. A deployment states which variant it runs:

    [custom]
    STOCK_COMMIT_POLICY = "creation"     # or "dispatch"
    TRANSITION_LINEAGE = "permissive"    # or "strict"
"""

from contextlib import contextmanager
from dataclasses import dataclass, replace

from protean.exceptions import ConfigurationError
from protean.utils.globals import current_domain

from distribution.order.workflow import StockCommitPolicy, TransitionLineage

_DEFAULTS = {
    "STOCK_COMMIT_POLICY": StockCommitPolicy.AT_CREATION.value,
    "TRANSITION_LINEAGE": TransitionLineage.PERMISSIVE.value,
    "ORDER_ID_PREFIX": "ORD",
    "WITHOUT_ASSIGNEE_ID": "685a4143374df5c794581187",
    "NOTIFICATION_MAX_RETRIES": 2,
    "NOTIFICATION_BACKOFF_SECONDS": 1,
}


@dataclass(frozen=True)
class Settings:
    stock_commit_policy: StockCommitPolicy
    transition_lineage: TransitionLineage
    order_id_prefix: str
    without_assignee_id: str
    notification_max_retries: int
    notification_backoff_seconds: int


def _choice(enum_cls, key, value):
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(member.value for member in enum_cls)
        raise ConfigurationError(f"{key} must be one of: {allowed} (got {value!r})")


def load_settings(config) -> Settings:
    """Build ``Settings`` from a domain config, falling back to defaults per key."""
    custom = {**_DEFAULTS, **(config.get("custom") or {})}

    return Settings(
        stock_commit_policy=_choice(StockCommitPolicy, "STOCK_COMMIT_POLICY", custom["STOCK_COMMIT_POLICY"]),
        transition_lineage=_choice(TransitionLineage, "TRANSITION_LINEAGE", custom["TRANSITION_LINEAGE"]),
        order_id_prefix=str(custom["ORDER_ID_PREFIX"]),
        without_assignee_id=str(custom["WITHOUT_ASSIGNEE_ID"]),
        notification_max_retries=int(custom["NOTIFICATION_MAX_RETRIES"]),
        notification_backoff_seconds=int(custom["NOTIFICATION_BACKOFF_SECONDS"]),
    )


_override: Settings | None = None


def current_settings() -> Settings:
    if _override is not None:
        return _override
    return load_settings(current_domain.config)


@contextmanager
def override_settings(**changes):
    """Temporarily replace settings, e.g. to exercise the other stock policy in tests."""
    global _override
    previous = _override
    _override = replace(current_settings(), **changes)
    try:
        yield _override
    finally:
        _override = previous
