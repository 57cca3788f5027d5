from .context_store import InMemoryContextStore
from .resources import FileSystemResources, ResourceResult, ResourceRootError

# Public adapter exports are optional but make wiring simpler.
__all__ = ["FileSystemResources", "InMemoryContextStore", "ResourceResult", "ResourceRootError"]
