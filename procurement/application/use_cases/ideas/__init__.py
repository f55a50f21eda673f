"""Idea use cases."""

from procurement.application.use_cases.ideas.idea_voting import IdeaVotingService

__all__ = ["IdeaVotingService"]
