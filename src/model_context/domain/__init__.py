from .errors import ContextStoreError, InvalidContextDataError, ModelAlreadyLoadedError, ModelNotFoundError

__all__ = [
    "ContextStoreError",
    "InvalidContextDataError",
    "ModelAlreadyLoadedError",
    "ModelNotFoundError",
]
