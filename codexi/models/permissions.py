from __future__ import annotations

"""Permission grants carried by personal tokens.

A token holds one list of free-form action names per category::

    {"llm": ["use"], "agent": ["use"], "project": [], "cli": []}

Downstream handlers ask for capabilities as ``"category:action"`` strings.
"""

from enum import Enum
from typing import Any, Iterable, Mapping

from pydantic import BaseModel, ConfigDict, Field, field_validator


class PermissionCategory(str, Enum):
    llm = "llm"
    agent = "agent"
    project = "project"
    cli = "cli"


class TokenPermissions(BaseModel):
    """Validated permission mapping. Unknown categories are rejected."""

    model_config = ConfigDict(extra="forbid")

    llm: list[str] = Field(default_factory=list, description="LLM actions, e.g. 'use'")
    agent: list[str] = Field(default_factory=list, description="Agent actions")
    project: list[str] = Field(default_factory=list, description="Project actions")
    cli: list[str] = Field(default_factory=list, description="CLI actions")

    @field_validator("llm", "agent", "project", "cli", mode="before")
    @classmethod
    def _null_means_empty(cls, v):
        return [] if v is None else v

    @field_validator("llm", "agent", "project", "cli")
    @classmethod
    def _dedupe(cls, v: list[str]) -> list[str]:
        seen: list[str] = []
        for action in v:
            if not action:
                raise ValueError("action names must be non-empty")
            if action not in seen:
                seen.append(action)
        return seen

    def as_mapping(self) -> dict[str, list[str]]:
        return {category.value: list(getattr(self, category.value)) for category in PermissionCategory}

    def allows(self, *requested: str) -> bool:
        return grants(list(requested), self.as_mapping())


def grants(requested: Iterable[Any] | None, permissions: Mapping[str, Any] | None) -> bool:
    """Return True only if every ``"category:action"`` in *requested* is held.

    The string is split on its first ``:``. Entries that are not strings or
    have no ``:`` are treated as not granted. An empty request always grants.
    """
    if not isinstance(permissions, Mapping):
        permissions = {}
    for entry in requested or []:
        if not isinstance(entry, str) or ":" not in entry:
            return False
        category, action = entry.split(":", 1)
        actions = permissions.get(category)
        if not isinstance(actions, (list, tuple, set, frozenset)) or action not in actions:
            return False
    return True
