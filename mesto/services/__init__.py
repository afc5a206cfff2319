# Services package init
"""
Mesto Backend - Services Layer
===============================

What:  Business logic layer sitting between routes (HTTP) and the store.
Why:   Routes handle HTTP, services handle rules (ownership, uniqueness,
       like semantics) and translate store faults into domain errors.

Service Inventory:
    - UserService: sign-up, credential check, profile/avatar updates
    - CardService: feed, create, owner-only delete, idempotent like/unlike
"""
