from __future__ import annotations

from dataclasses import dataclass, field
from threading import Lock

from model_context.codec.context_json import ContextDecodeError, decode_context, encode_context
from model_context.domain.errors import InvalidContextDataError, ModelAlreadyLoadedError, ModelNotFoundError
from model_context.ports.context_store import ContextStore


@dataclass(slots=True)
class _ContextSlot:
    # One record plus the lock serializing every operation on it.
    data: dict[str, str] = field(default_factory=dict)
    lock: Lock = field(default_factory=Lock, repr=False)


@dataclass
class InMemoryContextStore(ContextStore):
    # Memory-resident store; contents are lost when the process exits.
    # The table lock only guards the id -> slot mapping; record access goes through the slot lock,
    # so operations on different ids never wait on each other.
    _slots: dict[str, _ContextSlot] = field(default_factory=dict, init=False, repr=False)
    _table_lock: Lock = field(default_factory=Lock, init=False, repr=False)

    def load(self, model_id: str) -> None:
        with self._table_lock:
            if model_id in self._slots:
                raise ModelAlreadyLoadedError(model_id)
            self._slots[model_id] = _ContextSlot()

    def get(self, model_id: str) -> str:
        slot = self._slot(model_id, "Model not found.")
        with slot.lock:
            return encode_context(slot.data)

    def update(self, model_id: str, payload: str) -> None:
        slot = self._slot(model_id, "Model not found. Load model first.")
        # Decoding touches no shared state; a bad payload never reaches the slot.
        try:
            data = decode_context(payload)
        except ContextDecodeError as exc:
            raise InvalidContextDataError(model_id, str(exc)) from exc
        with slot.lock:
            slot.data = data

    def contains(self, model_id: str) -> bool:
        with self._table_lock:
            return model_id in self._slots

    def model_ids(self) -> list[str]:
        with self._table_lock:
            return sorted(self._slots)

    def snapshot(self, model_id: str) -> dict[str, str]:
        # Copy of the current record for diagnostics and tests; never the live dict.
        slot = self._slot(model_id, "Model not found.")
        with slot.lock:
            return dict(slot.data)

    def _slot(self, model_id: str, missing_message: str) -> _ContextSlot:
        with self._table_lock:
            slot = self._slots.get(model_id)
        if slot is None:
            raise ModelNotFoundError(model_id, missing_message)
        return slot
