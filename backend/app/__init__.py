"""
VoterReg Backend — Application Package Initializer
===================================================

What: Marks the `app` directory as a Python package.
Who:  Used implicitly by Python's import system and explicitly by Alembic, pytest, and uvicorn.

Architecture Note:
    The backend is layered the same way on every request path:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │   Services (Intake & Review Logic)  │  ← Eligibility, workflows, compensation
    ├─────────────────────────────────────┤
    │   Store & Bucket Storage (Boundary) │  ← select / insert / upsert / update, put
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy tables + Pydantic contracts
    └─────────────────────────────────────┘

    Services never open database sessions themselves; every write goes
    through the Store, which commits each primitive on its own.
"""

__version__ = "1.0.0"
