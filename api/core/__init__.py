"""
Shared, cross-cutting code for the API.

`core/` holds the small building blocks every feature uses (DB wiring,
settings, logging, error types). Feature-specific SQL and business logic live
in the corresponding feature package (e.g. `articles/`).
"""
