"""
Base building blocks:
identity and identifier parsing.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, ClassVar
from uuid import UUID, uuid4

if TYPE_CHECKING:
    from homeplans.domain.model.enums import EntityType


def new_id() -> UUID:
    return uuid4()


def parse_identifier(value: object) -> UUID | None:
    """Return ``value`` as a UUID if it is a syntactically valid identifier, else ``None``.

    Accepts ``UUID`` instances and strings (surrounding whitespace ignored). Anything
    else, including blank strings, is treated as "no identifier".
    """

    if isinstance(value, UUID):
        return value
    if not isinstance(value, str):
        return None
    candidate = value.strip()
    if not candidate:
        return None
    try:
        return UUID(candidate)
    except ValueError:
        return None


@dataclass(eq=False, kw_only=True)
class Entity:
    """Internal identity exists immediately in the domain."""

    id: UUID = field(default_factory=new_id)

    # class-level discriminator; subclasses must override
    ENTITY_TYPE: ClassVar[EntityType]

    @property
    def entity_type(self) -> EntityType:
        return self.ENTITY_TYPE
