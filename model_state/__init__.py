"""model_state - Persisted model preferences (recent, favorite, variant)"""

from model_state.core.exceptions import (
    ModelStateError,
    CorruptStateError,
    PersistenceError,
    VariantKeyError,
)
from model_state.core.models import MAX_RECENT, ModelRef, PreferenceState, parse_variant_key
from model_state.core.paths import resolve_state_path
from model_state.core.preferences import PreferenceStore
from model_state.storage.codec import serialize, deserialize
from model_state.storage.store import load_state, save_state, StateStorage


__version__ = "0.1.0"
__all__ = [
    "ModelStateError",
    "CorruptStateError",
    "PersistenceError",
    "VariantKeyError",
    "MAX_RECENT",
    "ModelRef",
    "PreferenceState",
    "parse_variant_key",
    "resolve_state_path",
    "PreferenceStore",
    "serialize",
    "deserialize",
    "load_state",
    "save_state",
    "StateStorage",
]
