"""specquery -- Query OpenAPI 2.0/3.x documents through a set of tools.

A spec is loaded once from a URL or file, dereferenced, and normalized into a
:class:`~specquery.models.ParsedSpec`. Tool calls then list and search its
endpoints, return request/response schemas, validate payloads, and generate
sample bodies, TypeScript types and cURL commands.

Typical workflow::

    specquery serve --spec openapi.yaml             # MCP server over stdio
    specquery call list_endpoints --spec openapi.yaml --arg tag=pets

Modules:
    app: Typer application factory and CLI entry point.
    models: Pydantic models shared across the entire package.
    service: The SpecService context object holding the active spec.
    tools: Tool handlers returning the uniform result envelope.
    server: MCP transport exposing the tools.
    config: XDG-aware configuration.
    exceptions: Exception hierarchy with codes and exit codes.
    exit_codes: Numeric exit codes.
    output: stdout/stderr formatting with Rich.
"""

__version__ = "0.1.0"
