from formforge.db.base import Base

__all__ = ["Base"]
