"""Id-to-name mapping: identifier caches, resolver and result enrichment."""

from .enrichment import MAX_ENHANCE_ITEMS, ResultEnricher
from .identifier_cache import CacheDomain, IdentifierCache
from .resolver import (
    MappingResolver,
    get_mapping_resolver,
    reset_mapping_resolver,
)

__all__ = [
    "MAX_ENHANCE_ITEMS",
    "CacheDomain",
    "IdentifierCache",
    "MappingResolver",
    "ResultEnricher",
    "get_mapping_resolver",
    "reset_mapping_resolver",
]
