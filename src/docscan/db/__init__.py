from .base import Base
from .engine import DBEngine
from .models import DocumentRow
from .repository import Repository
from .settings import DBSettings, get_db_settings
from .uow import UnitOfWork

__all__ = [
    "Base",
    "DBEngine",
    "DBSettings",
    "DocumentRow",
    "Repository",
    "UnitOfWork",
    "get_db_settings",
]
