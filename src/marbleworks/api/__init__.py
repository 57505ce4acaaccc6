"""Marbleworks — FastAPI REST API layer.

Modules
-------
main
    FastAPI application with the marble image route and the ``main()`` CLI
    entry point.
models
    Pydantic query model for request validation.
"""
