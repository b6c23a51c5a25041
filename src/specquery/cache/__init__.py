"""In-memory spec caching for specquery.

This package provides :class:`SpecCache`, a TTL-keyed store of normalized
:class:`~specquery.models.ParsedSpec` objects. It is consumed by
:class:`~specquery.service.SpecService`, which uses a single fixed key, and
its default TTL comes from :class:`~specquery.models.CacheConfig`.
"""

from specquery.cache.cache import SpecCache

__all__ = ["SpecCache"]
