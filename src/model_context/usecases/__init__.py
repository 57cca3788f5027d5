from .broadcast import BroadcastService
from .dispatch import ContextCommandService

__all__ = ["BroadcastService", "ContextCommandService"]
