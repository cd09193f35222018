"""Protocol interfaces for swappable implementations.

Protocols enable:
- Swapping the upstream store without touching the service layer
- Unit testing with fake connectors
"""

from .prompt_source import PromptSource

__all__ = [
    "PromptSource",
]
