"""
Mesto Backend - Application Package
====================================

A photo-sharing API: users, cards with likes, cookie-based sessions.

Layers:
    ┌─────────────────────────────────────┐
    │   Routes (API Layer)                │  ← HTTP concerns, session dependency
    ├─────────────────────────────────────┤
    │   Auth (tokens, session, guard)     │  ← who is calling, may they mutate
    ├─────────────────────────────────────┤
    │   Services (Business Logic)         │  ← ownership, likes, uniqueness
    ├─────────────────────────────────────┤
    │   Models & Schemas (Data)           │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │   Database (Persistence)            │  ← injected async engine/sessions
    └─────────────────────────────────────┘

`mesto.client` is the HTTP client counterpart of the same contract.
"""

__version__ = "1.0.0"
