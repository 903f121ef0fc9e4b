"""JSON encoding of the model preference document.

The on-disk field names (``recent``, ``favorite``, ``variant``,
``providerID``, ``modelID``) are shared with other tools that read the
same file, so they are produced through the pydantic aliases rather
than the Python attribute names.
"""

from __future__ import annotations

import json
from pathlib import PurePath
from typing import Any, Dict, Optional

from pydantic import ValidationError

from model_state.core.exceptions import CorruptStateError
from model_state.core.models import PreferenceState

__all__ = ["to_dict", "from_dict", "serialize", "deserialize"]


def to_dict(state: PreferenceState) -> Dict[str, Any]:
    """Convert state to its JSON-compatible document form"""
    return state.model_dump(mode="json", by_alias=True)


def from_dict(data: Any, path: Optional[PurePath] = None) -> PreferenceState:
    """Validate a decoded document

    ``favorite`` and ``variant`` may be absent; ``recent`` may not.

    Raises:
        CorruptStateError: If the document is not an object, lacks
            ``recent``, or any field has the wrong shape.
    """
    where = f" in {path}" if path is not None else ""
    if not isinstance(data, dict):
        raise CorruptStateError(
            f"Expected a JSON object{where}, got {type(data).__name__}", path=path
        )
    if "recent" not in data:
        raise CorruptStateError(f"Missing required field 'recent'{where}", path=path)

    try:
        return PreferenceState.model_validate(data)
    except ValidationError as e:
        raise CorruptStateError(f"Malformed model state{where}: {e}", path=path) from e


def serialize(state: PreferenceState) -> str:
    """Encode state as indented JSON text"""
    return json.dumps(to_dict(state), indent=2, ensure_ascii=False)


def deserialize(content: str, path: Optional[PurePath] = None) -> PreferenceState:
    """Decode JSON text into state

    Raises:
        CorruptStateError: If the text is not valid JSON or does not
            describe a valid document.
    """
    try:
        data = json.loads(content)
    except json.JSONDecodeError as e:
        where = f" in {path}" if path is not None else ""
        raise CorruptStateError(f"Invalid JSON{where}: {e}", path=path) from e
    return from_dict(data, path=path)
