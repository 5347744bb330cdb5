# Routes package init
"""
PlaceBook Backend: API Routes Package
=====================================

What:  HTTP route handlers; thin wrappers around the services.

Route Inventory:
    - places.py:  GET    /api/places/{placeId}
                  GET    /api/places/user/{userId}
                  POST   /api/places                (auth, multipart + image)
                  PATCH  /api/places/{placeId}      (auth, owner only)
                  DELETE /api/places/{placeId}      (auth, owner only)
    - users.py:   GET    /api/users
                  POST   /api/users/signup          (multipart + image)
                  POST   /api/users/login
    - health.py:  GET    /health
"""
