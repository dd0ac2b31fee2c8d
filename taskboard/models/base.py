from taskboard.db import Base

__all__ = ["Base"]
