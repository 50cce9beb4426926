"""Selectors: match predicates over objects, by exact id or attribute tag."""

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .world import GameObject

# A leading marker on a command token means "any object with this attribute".
ATTRIBUTE_MARKER = "@"


@dataclass(frozen=True)
class Selector:
    """Exactly one of object_id or attribute is set."""

    object_id: str | None = None
    attribute: str | None = None

    @classmethod
    def by_id(cls, object_id: str) -> "Selector":
        return cls(object_id=object_id)

    @classmethod
    def by_attribute(cls, attribute: str) -> "Selector":
        return cls(attribute=attribute)

    @property
    def is_attribute(self) -> bool:
        return self.object_id is None and self.attribute is not None

    def matches(self, candidate: "GameObject") -> bool:
        """Check an object against this selector.

        A selector with neither field set never matches.
        """
        if self.object_id is not None:
            return self.object_id == candidate.id
        if self.attribute is not None:
            return self.attribute in candidate.attributes
        return False

    def __str__(self) -> str:
        if self.attribute is not None:
            return ATTRIBUTE_MARKER + self.attribute
        return self.object_id or ""


def parse_selector(token: str) -> Selector:
    """Turn a raw command token into a Selector."""
    if token.startswith(ATTRIBUTE_MARKER):
        return Selector.by_attribute(token[len(ATTRIBUTE_MARKER):])
    return Selector.by_id(token)
