# Services package init
"""
PlaceBook Backend: Services Layer
=================================

What:  Business logic between the routes (HTTP) and the models (persistence).

Service Inventory:
    - PlaceService:   place reads and owner-consistent writes
    - UserService:    user listing, signup, login
    - AuthService:    bcrypt password hashing, JWT issue/verify
    - FileService:    image validation, storage and cleanup
    - Geocoder (abstract) / GoogleGeocoder: address → coordinates
"""
