from __future__ import annotations

from typing import Protocol, runtime_checkable


# ContextStore port: the only state shared between connections of the model-context service.
@runtime_checkable
class ContextStore(Protocol):
    def load(self, model_id: str) -> None:
        """Create an empty context for model_id; fails if it is already loaded."""
        raise NotImplementedError("ContextStore is a port; use a concrete adapter.")

    def get(self, model_id: str) -> str:
        """Return the serialized context for model_id; fails if it was never loaded."""
        raise NotImplementedError("ContextStore is a port; use a concrete adapter.")

    def update(self, model_id: str, payload: str) -> None:
        """Replace the whole context for model_id with the decoded payload."""
        raise NotImplementedError("ContextStore is a port; use a concrete adapter.")
