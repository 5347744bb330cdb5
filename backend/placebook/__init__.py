"""
PlaceBook Backend: Application Package
======================================

What: REST API for user accounts and user-submitted places.
Who:  Imported by uvicorn (``uvicorn placebook.main:app``), Alembic and pytest.

Architecture Note:
    ┌─────────────────────────────────────┐
    │     Routes + Middleware (HTTP)      │  ← endpoints, auth gate, uploads
    ├─────────────────────────────────────┤
    │        Services (Controllers)       │  ← places, users, auth, geocoding
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
