"""
MindWell Backend — Application Package Initializer
==================================================

What: Marks the `mindwell` directory as a Python package.
Who:  Used implicitly by Python's import system and explicitly by Alembic, pytest, and uvicorn.

Architecture Note:
    The backend is split into layers:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │   Dependencies (auth gate, owner)   │  ← identity + ownership checks
    ├─────────────────────────────────────┤
    │         Services (Business Logic)   │  ← billing, insights, accounts
    ├─────────────────────────────────────┤
    │     Repositories (Entity Store)     │  ← in-memory or SQLAlchemy
    ├─────────────────────────────────────┤
    │   Records, ORM Models & Schemas     │  ← dataclasses, SQLAlchemy, Pydantic
    └─────────────────────────────────────┘

    Routes never touch a storage backend directly; they receive an
    `EntityStore` through FastAPI dependency injection, so every layer can be
    exercised in isolation.
"""

__version__ = "1.0.0"
