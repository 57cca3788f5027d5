from __future__ import annotations


class ContextStoreError(ValueError):
    # Base class for store semantic errors; the message is the client-facing reason.
    pass


class ModelAlreadyLoadedError(ContextStoreError):
    def __init__(self, model_id: str) -> None:
        super().__init__("Model already loaded.")
        self.model_id = model_id


class ModelNotFoundError(ContextStoreError):
    def __init__(self, model_id: str, message: str = "Model not found.") -> None:
        super().__init__(message)
        self.model_id = model_id


class InvalidContextDataError(ContextStoreError):
    # Update payload rejected by the context decoder; stored record is left untouched.
    def __init__(self, model_id: str, diagnostic: str) -> None:
        super().__init__(f"Invalid JSON data: {diagnostic}")
        self.model_id = model_id
        self.diagnostic = diagnostic
