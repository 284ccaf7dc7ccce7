"""Stop pole domain model."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class StopPole:
    """A single physical boarding point.

    The id is the canonical ``owl:sameAs`` identifier, not the short pole
    number the operator paints on the sign.
    """

    id: str
    title: str
    pattern_ids: tuple[str, ...] = field(default_factory=tuple)
    pole_number: str | None = None
