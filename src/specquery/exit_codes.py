"""Numeric process exit codes used by the ``specquery`` CLI.

Each constant maps to an error category and is referenced by the
corresponding :class:`~specquery.exceptions.SpecQueryError` subclass, so
shell wrappers can branch on ``$?`` without parsing stderr.

Example::

    $ specquery call get_endpoint_details --spec api.yaml --arg path=/nope --arg method=get
    $ echo $?
    4   # EXIT_NOT_FOUND -- the endpoint or schema does not exist
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid or insufficient arguments."""

EXIT_SPEC_NOT_LOADED = 3
"""A query was issued before any spec was loaded."""

EXIT_NOT_FOUND = 4
"""The requested endpoint, schema, or request body does not exist."""

EXIT_VALIDATION_FAILED = 5
"""A schema could not be compiled for payload validation."""

EXIT_SPEC_LOAD_ERROR = 7
"""The OpenAPI document could not be fetched, parsed, or validated."""
