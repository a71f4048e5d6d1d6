from parkboard.db.base import Base

__all__ = ["Base"]
