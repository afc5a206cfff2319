"""
Mesto Backend - Pydantic Request/Response Schemas
==================================================

Schemas are the declarative validation layer: each request body is a model
(field → type + constraint) that FastAPI checks before a handler runs, so
malformed input never reaches the store. Response models decide exactly
which fields leave the server; the password hash has no response field.

JSON keys follow the Mesto frontend contract (`_id`, `createdAt`) through
pydantic aliases.
"""
