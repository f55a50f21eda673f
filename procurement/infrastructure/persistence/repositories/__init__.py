"""SQLAlchemy repositories implementing the application repository ports."""

from procurement.infrastructure.persistence.repositories.base import BaseRepository
from procurement.infrastructure.persistence.repositories.combined_request_repo import (
    CombinedRequestRepository,
)
from procurement.infrastructure.persistence.repositories.idea_repo import IdeaRepository
from procurement.infrastructure.persistence.repositories.request_repo import RequestRepository
from procurement.infrastructure.persistence.repositories.user_repo import (
    DepartmentRepository,
    UserRepository,
)

__all__ = [
    "BaseRepository",
    "CombinedRequestRepository",
    "DepartmentRepository",
    "IdeaRepository",
    "RequestRepository",
    "UserRepository",
]
