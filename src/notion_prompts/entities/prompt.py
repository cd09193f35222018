"""Prompt domain entities."""

from dataclasses import dataclass

UNCATEGORIZED = "Uncategorized"


@dataclass(frozen=True)
class PromptInfo:
    """Listing view of a prompt, without its template content.

    Attributes:
        id: Upstream page id
        name: Human-chosen label (not guaranteed unique)
        description: Free text, empty when absent upstream
        category: Category labels in upstream display order
    """

    id: str
    name: str
    description: str
    category: tuple[str, ...]


@dataclass(frozen=True)
class Prompt:
    """A named text template loaded from the upstream database.

    Attributes:
        id: Upstream page id, unique within the database
        name: Human-chosen label (not guaranteed unique)
        content: Template text, may contain ``{{PLACEHOLDER}}`` tokens
        description: Free text, empty when absent upstream
        category: Non-empty category labels; ``(UNCATEGORIZED,)`` when none
    """

    id: str
    name: str
    content: str
    description: str = ""
    category: tuple[str, ...] = (UNCATEGORIZED,)

    def to_info(self) -> PromptInfo:
        """Project to the content-free listing view."""
        return PromptInfo(
            id=self.id,
            name=self.name,
            description=self.description,
            category=self.category,
        )
