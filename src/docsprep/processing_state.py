"""Mutable state for a single processing run.

Matchers, the exclude set and the configuration are immutable once built;
everything that changes while files are copied lives here and is owned by
the Processor.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path


@dataclass
class ProcessingState:
    """Per-run bookkeeping.

    Attributes:
        claimed_destinations: Destination path mapped to the source that first wrote (or,
            in dry-run mode, would have written) it
        touched_destinations: Destinations written during this run
        overwritten_destinations: Destinations written more than once during this run
    """

    claimed_destinations: dict[Path, Path] = field(default_factory=dict)
    touched_destinations: set[Path] = field(default_factory=set)
    overwritten_destinations: list[Path] = field(default_factory=list)

    def claim(self, destination: Path, source: Path) -> Path | None:
        """Record ``source`` as a writer of ``destination``.

        Returns the source that claimed the destination earlier in this run,
        or ``None`` when this is the first claim.
        """
        previous = self.claimed_destinations.get(destination)
        if previous is None:
            self.claimed_destinations[destination] = source
        return previous

    def reset(self) -> None:
        self.claimed_destinations.clear()
        self.touched_destinations.clear()
        self.overwritten_destinations.clear()
