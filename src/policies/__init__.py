"""Category scoring policies and the registry that resolves them."""

from src.policies.registry import (
    DEFAULT_POLICY,
    CategoryPolicy,
    PolicyRegistry,
    ScoringMethod,
    ValueFormat,
    default_registry,
    get_policy,
    is_known_category,
)

__all__ = [
    "CategoryPolicy",
    "PolicyRegistry",
    "ScoringMethod",
    "ValueFormat",
    "DEFAULT_POLICY",
    "default_registry",
    "get_policy",
    "is_known_category",
]
