"""
Shared, cross-cutting code for the API.

`core/` holds the building blocks every feature uses (DB wiring, settings,
logging, errors, process lifecycle). Feature-specific SQL and request
handling live in the feature package (e.g. `hello/`).
"""
