"""
Problem value object.

Problems live in track metadata rather than in the database; a submission
only needs the track id and the problem slug.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class Problem:
    """An exercise within a track, e.g. ``Problem("ruby", "leap")``."""
    track_id: str
    slug: str

    @property
    def name(self) -> str:
        """Human readable name derived from the slug."""
        return " ".join(part.capitalize() for part in self.slug.split("-"))
