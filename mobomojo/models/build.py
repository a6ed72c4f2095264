"""Configuration, summary, and persisted-build models for the MoboMojo engine."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from mobomojo.models.components import (
    CATEGORY_ORDER,
    Category,
    Component,
    ComponentType,
    category_name,
)


def category_sort_key(category: Any) -> Tuple[int, str]:
    """Canonical slot order; foreign categories sort last, by name."""
    name = category_name(category)
    for index, known in enumerate(CATEGORY_ORDER):
        if known.value == name:
            return (index, "")
    return (len(CATEGORY_ORDER), name)


# ──────────────────────────────────────────────
# Configuration
# ──────────────────────────────────────────────


class Configuration(BaseModel):
    """A PC configuration: at most one component per category.

    Immutable value: every update returns a new Configuration, so a
    caller can hand the same instance to many engine calls safely.
    """

    model_config = ConfigDict(frozen=True)

    slots: Dict[Category, Component] = Field(default_factory=dict)

    @model_validator(mode="after")
    def _validate_slot_keys(self) -> "Configuration":
        for category, component in self.slots.items():
            if category_name(category) != component.category:
                raise ValueError(
                    f"Component {component.id} ({component.category}) "
                    f"cannot occupy the {category_name(category)} slot"
                )
        return self

    @classmethod
    def of(cls, *components: Component) -> "Configuration":
        """Build a configuration from components; later ones replace earlier."""
        config = cls()
        for component in components:
            config = config.with_component(component)
        return config

    # ── Queries ──

    def get(self, category: Any) -> Optional[Component]:
        """Occupant of a slot, or None when the slot is empty."""
        name = category_name(category)
        for key, component in self.slots.items():
            if category_name(key) == name:
                return component
        return None

    def components(self) -> List[Component]:
        """Occupants in canonical category order."""
        keys = sorted(self.slots, key=category_sort_key)
        return [self.slots[k] for k in keys]

    def signature(self) -> Tuple[Tuple[str, str], ...]:
        """Hashable identity: sorted (category, component id) pairs."""
        return tuple((c.category, c.id) for c in self.components())

    def __contains__(self, category: Any) -> bool:
        return self.get(category) is not None

    def __len__(self) -> int:
        return len(self.slots)

    # ── Updates (return new instances) ──

    def with_component(self, component: Component) -> "Configuration":
        """Put a component into its category's slot, replacing any occupant."""
        slots = {
            k: v for k, v in self.slots.items()
            if category_name(k) != component.category
        }
        slots[component.type] = component
        return Configuration(slots=slots)

    def without(self, category: Any) -> "Configuration":
        """Clear one slot. Clearing an empty slot is a no-op."""
        name = category_name(category)
        slots = {k: v for k, v in self.slots.items() if category_name(k) != name}
        return Configuration(slots=slots)

    def cleared(self) -> "Configuration":
        """An empty configuration."""
        return Configuration()


# ──────────────────────────────────────────────
# Summary
# ──────────────────────────────────────────────


class AggregateSummary(BaseModel):
    """Total price plus per-category violations of a configuration.

    `violations` only holds categories with at least one violation.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    total_price: int = 0
    violations: Dict[str, List[str]] = Field(default_factory=dict)

    @property
    def is_compatible(self) -> bool:
        """True when no occupied slot reports a violation."""
        return not self.violations


# ──────────────────────────────────────────────
# Persisted Build Record
# ──────────────────────────────────────────────


class SavedBuild(BaseModel):
    """Record consumed by the external build store.

    Serialized with camelCase keys (buildName, totalPrice, createdAt).
    `id` and `user_id` belong to the store; they round-trip untouched.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: Optional[str] = None
    user_id: Optional[str] = Field(default=None, alias="user_id")
    build_name: str
    components: Dict[str, str] = Field(default_factory=dict)
    total_price: int = Field(ge=0)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


# ──────────────────────────────────────────────
# Recommendation Picks
# ──────────────────────────────────────────────


class Suggestion(BaseModel):
    """A structured component pick from the recommendation service."""

    type: ComponentType
    name: str
