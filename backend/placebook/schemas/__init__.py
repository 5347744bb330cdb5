"""
PlaceBook Backend: Pydantic Request/Response Schemas
====================================================

Schemas are separate from the SQLAlchemy models: they decide exactly which
fields leave the API (passwords never do) and carry the input rules that
short-circuit a request with 422 before any database or network work.
"""
