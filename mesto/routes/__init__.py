# Routes package init
"""
Mesto Backend - API Routes Package
===================================

Route Inventory:
    - auth.py:    POST /signup, POST /signin, DELETE /signout   (public)
    - users.py:   GET /users, GET/PATCH /users/me, PATCH /users/me/avatar,
                  GET /users/{user_id}                          (session required)
    - cards.py:   GET/POST /cards, DELETE /cards/{card_id},
                  PUT/DELETE /cards/{card_id}/likes             (session required)
    - health.py:  GET /health                                   (public)

Design Principle:
    Routes are THIN. The session requirement is declared once per router
    (dependencies=[Depends(require_identity)]) so no protected handler can
    be added without it.
"""
