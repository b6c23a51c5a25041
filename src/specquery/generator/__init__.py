"""Artifact generators driven by normalized JSON Schema nodes.

* :mod:`~specquery.generator.sample` -- deterministic sample payloads.
* :mod:`~specquery.generator.typescript` -- TypeScript type declarations.
* :mod:`~specquery.generator.curl` -- ready-to-run cURL commands.

All generators are pure: they never mutate the schemas they walk and bound
their recursion so a cyclic schema cannot run away.
"""

from specquery.generator.curl import generate_curl
from specquery.generator.sample import generate_sample
from specquery.generator.typescript import generate_endpoint_types, generate_typescript

__all__ = ["generate_curl", "generate_endpoint_types", "generate_sample", "generate_typescript"]
