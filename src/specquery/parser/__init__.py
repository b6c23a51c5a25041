"""OpenAPI document parsing -- load, resolve ``$ref`` pointers, and normalize.

Typical usage::

    from specquery.parser import load_spec_document, normalize

    result = load_spec_document(url="https://petstore3.swagger.io/api/v3/openapi.json")
    spec = normalize(result.document, result.source)

Sub-modules:

* :mod:`~specquery.parser.loader` -- URL/file I/O, JSON/YAML parsing,
  version checks and structural validation.
* :mod:`~specquery.parser.resolver` -- Recursive ``$ref`` resolution with
  circular-reference stubs.
* :mod:`~specquery.parser.normalizer` -- Dialect-aware conversion into
  :class:`~specquery.models.ParsedSpec`.
"""

from specquery.parser.loader import LoadResult, load_spec_document
from specquery.parser.normalizer import normalize

__all__ = ["LoadResult", "load_spec_document", "normalize"]
