"""Cache snapshot domain entity."""

import time
from dataclasses import dataclass, field

from .prompt import Prompt


@dataclass(frozen=True)
class CacheSnapshot:
    """Immutable, fully populated point-in-time copy of all prompts.

    A refresh builds a new snapshot and swaps the reference; nothing ever
    mutates one in place.

    Attributes:
        prompts: Prompts in upstream order
        captured_at: ``time.monotonic()`` value when the snapshot was built
    """

    prompts: tuple[Prompt, ...]
    captured_at: float = field(default_factory=time.monotonic)

    def age_ms(self, now: float | None = None) -> float:
        """Milliseconds since capture."""
        now = time.monotonic() if now is None else now
        return (now - self.captured_at) * 1000

    def is_expired(self, expiry_ms: int, now: float | None = None) -> bool:
        """Whether the snapshot is at least ``expiry_ms`` old."""
        return self.age_ms(now) >= expiry_ms
