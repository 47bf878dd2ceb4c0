"""
World snapshot models.

A scene file describes a game world as a tree of entities, each carrying
named components whose values are plain JSON data.
"""

from typing import Any

from pydantic import BaseModel, Field


class EntityRecord(BaseModel):
    """One entity of a world snapshot."""

    name: str | None = Field(default=None, description="Optional entity label")
    enabled: bool = Field(default=True)
    components: dict[str, Any] = Field(
        default_factory=dict, description="Component type name -> component value"
    )
    children: list["EntityRecord"] = Field(default_factory=list)


class World(BaseModel):
    """A serializable game-world snapshot."""

    max_capacity: int | None = Field(default=None, ge=0, description="Entity capacity hint")
    entities: list[EntityRecord] = Field(default_factory=list)

    def entity_count(self) -> int:
        """Count entities including nested children."""
        count = 0
        stack = list(self.entities)
        while stack:
            entity = stack.pop()
            count += 1
            stack.extend(entity.children)
        return count
