"""
PlaceBook Backend: ORM Models
=============================

Importing this package registers every model on ``Base.metadata``
(needed by Alembic autogenerate and `Database.create_all`).
"""

from placebook.models.place import Place
from placebook.models.user import User

__all__ = ["Place", "User"]
