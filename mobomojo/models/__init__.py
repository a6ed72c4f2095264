"""Pydantic models for components, configurations, and build records."""

from mobomojo.models.build import (
    AggregateSummary,
    Configuration,
    SavedBuild,
    Suggestion,
    category_sort_key,
)
from mobomojo.models.components import (
    CATEGORY_ORDER,
    CPUSpecs,
    CaseSpecs,
    Category,
    Component,
    ComponentSpecs,
    ComponentType,
    CoolerSpecs,
    GPUSpecs,
    MotherboardSpecs,
    PSUSpecs,
    RAMSpecs,
    StorageSpecs,
    category_name,
    spec_model_for,
)

__all__ = [
    # Components & enums
    "CATEGORY_ORDER",
    "Category",
    "Component",
    "ComponentType",
    "category_name",
    "spec_model_for",
    # Spec variants
    "CPUSpecs",
    "CaseSpecs",
    "ComponentSpecs",
    "CoolerSpecs",
    "GPUSpecs",
    "MotherboardSpecs",
    "PSUSpecs",
    "RAMSpecs",
    "StorageSpecs",
    # Build models
    "AggregateSummary",
    "Configuration",
    "SavedBuild",
    "Suggestion",
    "category_sort_key",
]
