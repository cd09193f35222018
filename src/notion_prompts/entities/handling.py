"""Composition result entities."""

from dataclasses import dataclass
from enum import Enum
from typing import Any


class HandlingMode(str, Enum):
    """Policy for what accompanies a composed prompt."""

    RETURN_ONLY = "return_only"
    PROCESS_LOCALLY = "process_locally"
    CALL_EXTERNAL_API = "call_external_api"


@dataclass(frozen=True)
class HandlingResult:
    """A composed prompt wrapped according to a handling mode.

    Attributes:
        text: The composed text, or a placeholder for unimplemented modes
        metadata: Processing hints for the caller, None when not applicable
    """

    text: str
    metadata: dict[str, Any] | None = None
