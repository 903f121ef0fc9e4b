"""model_state - Pydantic models for the model preference document"""

from __future__ import annotations
from typing import Dict, List, Optional, Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from model_state.core.exceptions import VariantKeyError


MAX_RECENT = 10
KEY_SEPARATOR = "/"


class ModelRef(BaseModel):
    """Reference to a selectable model

    Identifies a model by the provider namespace and the model
    identifier within that provider. Equality is exact and
    case-sensitive on both fields.
    """

    provider_id: str = Field(alias="providerID", description="Provider namespace")
    model_id: str = Field(alias="modelID", description="Model identifier within the provider")

    model_config = ConfigDict(
        frozen=True, populate_by_name=True, extra="ignore", protected_namespaces=()
    )

    @property
    def key(self) -> str:
        """Variant map key for this model"""
        return f"{self.provider_id}{KEY_SEPARATOR}{self.model_id}"

    @classmethod
    def parse(cls, value: str) -> ModelRef:
        """Build a ModelRef from ``provider/model``

        Only the first separator splits, so model IDs may themselves
        contain slashes (``openrouter/openai/gpt-5``).

        Raises:
            ValueError: If the provider or model part is missing.
        """
        provider_id, sep, model_id = value.partition(KEY_SEPARATOR)
        if not sep or not provider_id or not model_id:
            raise ValueError(f"Expected provider/model, got {value!r}")
        return cls(provider_id=provider_id, model_id=model_id)

    def __str__(self) -> str:
        return self.key


def parse_variant_key(key: str) -> ModelRef:
    """Strictly parse a variant map key back into a ModelRef

    Loading tolerates malformed keys; this helper is for callers
    that want to reject them.

    Raises:
        VariantKeyError: If the key is not of the form provider/model.
    """
    try:
        return ModelRef.parse(key)
    except ValueError as e:
        raise VariantKeyError(str(e)) from e


class PreferenceState(BaseModel):
    """The whole model preference document

    ``recent`` is most-recent-first and capped at MAX_RECENT entries.
    ``favorite`` behaves as a set but keeps insertion order for display.
    ``variant`` is sparse: an absent key means no preference.
    """

    recent: List[ModelRef]
    favorite: List[ModelRef] = Field(default_factory=list)
    variant: Dict[str, str] = Field(default_factory=dict)

    model_config = ConfigDict(extra="ignore")

    @field_validator("favorite", mode="before")
    @classmethod
    def null_favorite_as_empty(cls, v: Any) -> Any:
        """Treat an explicit null like an absent favorite list"""
        return [] if v is None else v

    @field_validator("variant", mode="before")
    @classmethod
    def null_variant_as_empty(cls, v: Any) -> Any:
        """Treat an explicit null like an absent variant map"""
        return {} if v is None else v

    @field_validator("recent", "favorite")
    @classmethod
    def drop_duplicates(cls, v: List[ModelRef]) -> List[ModelRef]:
        """Keep the first occurrence of each ref"""
        seen: set[ModelRef] = set()
        unique = []
        for ref in v:
            if ref not in seen:
                seen.add(ref)
                unique.append(ref)
        return unique

    @field_validator("recent")
    @classmethod
    def cap_recent(cls, v: List[ModelRef]) -> List[ModelRef]:
        """Truncate the recency list to MAX_RECENT entries"""
        return v[:MAX_RECENT]

    @classmethod
    def empty(cls) -> PreferenceState:
        """Document used on first run, when no state file exists"""
        return cls(recent=[], favorite=[], variant={})

    def variant_for(self, ref: ModelRef) -> Optional[str]:
        """Variant stored for a model, if any"""
        return self.variant.get(ref.key)
