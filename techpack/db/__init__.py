"""Database layer for the tech-pack service with async SQLAlchemy."""

from techpack.db.connection import get_session, init_db
from techpack.db.models import Base, ProductModel, ProductTechPackModel, TechFileModel

__all__ = [
    "Base",
    "ProductModel",
    "TechFileModel",
    "ProductTechPackModel",
    "get_session",
    "init_db",
]
