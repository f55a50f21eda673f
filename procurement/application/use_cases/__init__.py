"""Application use cases (orchestrate domain and repositories)."""

from procurement.application.use_cases.combination import CombinationService
from procurement.application.use_cases.ideas import IdeaVotingService
from procurement.application.use_cases.requests import RequestService

__all__ = ["CombinationService", "IdeaVotingService", "RequestService"]
