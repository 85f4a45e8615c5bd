"""ORM models. Importing this package registers every table with Base.metadata."""

from recortes.models.user import User
from recortes.models.cut import Cut, CutStatus

__all__ = ["User", "Cut", "CutStatus"]
