"""Domain error taxonomy for catalog lookups and maintenance."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from homeplans.domain.model.enums import EntityType


class CatalogError(RuntimeError):
    """Base class for catalog domain errors."""


class EntityNotFoundError(CatalogError):
    """Raised when a reference cannot be resolved to a canonical entity.

    Terminal: callers must not retry and never receive partial identification.
    """

    def __init__(self, entity_type: EntityType, reference: object | None = None) -> None:
        self.entity_type = entity_type
        self.reference = reference
        detail = f" ({reference!r})" if reference is not None else ""
        super().__init__(f"{entity_type.value.replace('_', ' ').capitalize()} not found{detail}")


class InvalidReferenceError(CatalogError, ValueError):
    """Raised when a required identifier is not syntactically valid."""

    def __init__(self, entity_type: EntityType, reference: object) -> None:
        self.entity_type = entity_type
        self.reference = reference
        super().__init__(f"Invalid {entity_type.value.replace('_', ' ')} id: {reference!r}")


class DuplicateEntityError(CatalogError):
    """Raised when creating an entity would violate a uniqueness rule."""


class CommunityHierarchyError(CatalogError, ValueError):
    """Raised when a parent assignment is not allowed."""
