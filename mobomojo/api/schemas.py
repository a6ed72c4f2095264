"""Request bodies for the builder API.

Configurations travel as a mapping of category name to component id,
the same shape the saved-build record uses.
"""

from __future__ import annotations

from typing import Dict, List

from pydantic import BaseModel, Field

from mobomojo.catalog.query import SortDirective
from mobomojo.models.build import Suggestion


class ConfigurationRequest(BaseModel):
    """A configuration by reference: {"CPU": "cpu-1", "RAM": "ram-3", ...}"""

    components: Dict[str, str] = Field(default_factory=dict)


class EvaluateRequest(ConfigurationRequest):
    """A candidate id checked against a configuration."""

    candidate_id: str


class CandidateQuery(ConfigurationRequest):
    """Catalog query plus the configuration used to mark candidates."""

    search: str = ""
    filters: Dict[str, str] = Field(default_factory=dict)
    sort: SortDirective = Field(default_factory=SortDirective)


class RecordRequest(ConfigurationRequest):
    """Produce the persisted-build record for a configuration."""

    build_name: str


class SuggestionRequest(ConfigurationRequest):
    """Apply recommendation picks to a configuration."""

    suggestions: List[Suggestion] = Field(default_factory=list)
