"""Application services orchestrating repository calls for the HTTP layer."""

from .practice_tree import GetPracticeTreeService, PracticeNotFoundError

__all__ = ["GetPracticeTreeService", "PracticeNotFoundError"]
