"""apinav -- Parse OpenAPI 3.x and Swagger 2.0 documents into navigable API references.

This package ingests a specification document, resolves its internal
``$ref`` pointers, normalises both schema dialects into one model and derives
a flat list of endpoints plus a deterministic, linkable navigation tree.

Typical workflow::

    apinav nav petstore.yaml                     # print the navigation tree
    apinav show petstore.yaml /api_reference/pet/addpet

The same pipeline is available as a library through
:class:`apinav.parser.SpecParser` and :class:`apinav.catalog.SpecCatalog`.

Modules:
    app: Typer application and CLI entry point.
    models: Pydantic models shared across the entire package.
    catalog: Source-keyed registry of loaded documents.
    config: Parser configuration resolution and data directories.
    exceptions: Exception hierarchy with exit-code mapping.
    exit_codes: Numeric exit codes following clig.dev conventions.
    output: stdout/stderr formatting system with Rich support.
"""

__version__ = "0.1.0"
