from .context_store import ContextStore
from .line_service import LineService

# Public port exports keep wiring explicit at composition time.
__all__ = ["ContextStore", "LineService"]
