"""Shared enums, per-category spec variants, and the Component model."""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Any, Dict, Optional, Tuple, Type, Union

from pydantic import BaseModel, ConfigDict, Field, SerializeAsAny, model_validator
from pydantic.alias_generators import to_camel


# ──────────────────────────────────────────────
# Enums: shared vocabulary
# ──────────────────────────────────────────────


class ComponentType(str, Enum):
    """The eight hardware categories of an assembled PC."""

    CPU = "CPU"
    MOTHERBOARD = "Motherboard"
    RAM = "RAM"
    GPU = "GPU"
    STORAGE = "Storage"
    PSU = "PSU"
    CASE = "Case"
    COOLER = "Cooler"


# Canonical slot order (builder rows, summaries, saved records)
CATEGORY_ORDER: Tuple[ComponentType, ...] = tuple(ComponentType)


# A known ComponentType, or any other string kept verbatim.
# Left-to-right so "CPU" becomes ComponentType.CPU rather than a bare str.
Category = Annotated[Union[ComponentType, str], Field(union_mode="left_to_right")]


def category_name(category: Any) -> str:
    """Plain string value of a category (enum or foreign)."""
    return category.value if isinstance(category, Enum) else str(category)


# ──────────────────────────────────────────────
# Spec variants: one per category
# ──────────────────────────────────────────────


class ComponentSpecs(BaseModel):
    """Base attribute bag.

    Every attribute is optional; None means "absent/unknown", never zero.
    Catalog JSON uses camelCase keys, snake_case is accepted as well.
    Unknown keys are kept as extras (display and filtering only).
    """

    model_config = ConfigDict(
        frozen=True,
        extra="allow",
        alias_generator=to_camel,
        populate_by_name=True,
    )

    def get(self, key: str, default: Any = None) -> Any:
        """Look up an attribute by snake_case or camelCase name."""
        for name, field_info in type(self).model_fields.items():
            if key in (name, field_info.alias):
                value = getattr(self, name)
                return default if value is None else value
        extras = self.model_extra or {}
        value = extras.get(key)
        return default if value is None else value


class CPUSpecs(ComponentSpecs):
    socket: Optional[str] = None
    cores: Optional[str] = None
    power_draw: Optional[int] = Field(default=None, ge=0, description="Watts")
    supported_ram_speed: Optional[str] = None


class MotherboardSpecs(ComponentSpecs):
    socket: Optional[str] = None
    form_factor: Optional[str] = None
    chipset: Optional[str] = None
    memory_type: Optional[str] = None
    supported_ram_speeds: Optional[Tuple[str, ...]] = None


class RAMSpecs(ComponentSpecs):
    ram_type: Optional[str] = None
    speed: Optional[str] = None
    size: Optional[str] = None


class GPUSpecs(ComponentSpecs):
    vram: Optional[str] = None
    length: Optional[int] = Field(default=None, ge=0, description="mm")
    power_draw: Optional[int] = Field(default=None, ge=0, description="Watts")


class StorageSpecs(ComponentSpecs):
    capacity: Optional[str] = None
    interface: Optional[str] = None


class PSUSpecs(ComponentSpecs):
    wattage: Optional[int] = Field(default=None, ge=0, description="Watts")
    efficiency: Optional[str] = None


class CaseSpecs(ComponentSpecs):
    supported_form_factors: Optional[Tuple[str, ...]] = None
    max_gpu_length: Optional[int] = Field(default=None, ge=0, description="mm")
    max_cooler_height: Optional[int] = Field(default=None, ge=0, description="mm")


class CoolerSpecs(ComponentSpecs):
    height: Optional[int] = Field(default=None, ge=0, description="mm")


SPEC_MODELS: Dict[ComponentType, Type[ComponentSpecs]] = {
    ComponentType.CPU: CPUSpecs,
    ComponentType.MOTHERBOARD: MotherboardSpecs,
    ComponentType.RAM: RAMSpecs,
    ComponentType.GPU: GPUSpecs,
    ComponentType.STORAGE: StorageSpecs,
    ComponentType.PSU: PSUSpecs,
    ComponentType.CASE: CaseSpecs,
    ComponentType.COOLER: CoolerSpecs,
}


def spec_model_for(category: Any) -> Type[ComponentSpecs]:
    """Spec variant for a category; foreign categories get the base bag."""
    try:
        return SPEC_MODELS[ComponentType(category_name(category))]
    except ValueError:
        return ComponentSpecs


# ──────────────────────────────────────────────
# Component
# ──────────────────────────────────────────────


class Component(BaseModel):
    """Immutable catalog entry.

    `specs` is validated into the variant matching `type`, so a CPU
    always carries CPUSpecs, a case always carries CaseSpecs, etc.
    """

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    id: str
    name: str
    type: Category
    price: int = Field(ge=0, description="Price in minor currency units")
    image_url: str = ""
    specs: SerializeAsAny[ComponentSpecs] = Field(default_factory=ComponentSpecs)

    @model_validator(mode="before")
    @classmethod
    def _select_spec_variant(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        model = spec_model_for(data.get("type"))
        specs = data.get("specs")
        if specs is None:
            return {**data, "specs": model()}
        if isinstance(specs, dict):
            return {**data, "specs": model.model_validate(specs)}
        if isinstance(specs, ComponentSpecs) and not isinstance(specs, model):
            return {**data, "specs": model.model_validate(specs.model_dump())}
        return data

    @property
    def category(self) -> str:
        """Plain string value of `type`."""
        return category_name(self.type)

    def spec(self, key: str, default: Any = None) -> Any:
        """Shortcut for `self.specs.get(key)`."""
        return self.specs.get(key, default)
