"""Position-tracking reader over a BCBP string."""

# Standard imports
from dataclasses import dataclass

# Section names
HEADER = "header"
LEG_MANDATORY = "leg_mandatory"
CONDITIONAL_UNIQUE = "conditional_unique"
CONDITIONAL_LEG = "conditional_leg"
SECURITY = "security"

SECTIONS = (
    HEADER, LEG_MANDATORY, CONDITIONAL_UNIQUE, CONDITIONAL_LEG, SECURITY,
)

@dataclass(frozen=True)
class Segment:
    """
    One decoded field occurrence.

    start and end are offsets into the BCBP text, forming the half-open
    interval [start, end).
    """
    key: str
    label: str
    value: str
    raw: str
    start: int
    end: int
    section: str
    description: str = ""

    def __len__(self):
        return self.end - self.start

    def covers(self, offset: int) -> bool:
        """Checks whether an offset falls inside this segment."""
        return self.start <= offset < self.end


class FieldExtractor():
    """
    Reads labelled fields from a BCBP string, recording a Segment for
    each read.

    The cursor only moves forward, so segments are recorded in strictly
    increasing offset order and tile the consumed text.
    """

    def __init__(self, bcbp_str: str):
        self.bcbp_str: str = bcbp_str
        self.segments: list[Segment] = []
        self._cursor: int = 0

    def __len__(self):
        return len(self.bcbp_str)

    @property
    def remaining(self) -> int:
        """Number of characters left after the cursor."""
        return max(len(self.bcbp_str) - self._cursor, 0)

    def position(self) -> int:
        """Returns the current cursor offset."""
        return self._cursor

    def at_end(self) -> bool:
        """Checks whether the cursor has reached the end of the text."""
        return self._cursor >= len(self.bcbp_str)

    def peek(self, length: int = 1) -> str:
        """Returns upcoming characters without moving the cursor."""
        return self.bcbp_str[self._cursor:self._cursor + length]

    def read(self,
        length: int,
        key: str,
        label: str,
        section: str,
        description: str = "",
        limit: int | None = None,
    ) -> Segment | None:
        """
        Consumes up to length characters and records them as a Segment.

        Fewer characters are consumed when the text (or the optional
        limit offset) ends first. Returns None without moving the cursor
        when nothing can be consumed.
        """
        stop = len(self.bcbp_str)
        if limit is not None:
            stop = min(stop, limit)
        length = min(length, stop - self._cursor)
        if length <= 0:
            return None
        raw = self.bcbp_str[self._cursor:self._cursor + length]
        segment = Segment(
            key=key,
            label=label,
            value=raw.strip(),
            raw=raw,
            start=self._cursor,
            end=self._cursor + length,
            section=section,
            description=description,
        )
        self.segments.append(segment)
        self._cursor += length
        return segment

    def segment_at(self, offset: int) -> Segment | None:
        """Finds the segment covering an offset."""
        for segment in self.segments:
            if segment.covers(offset):
                return segment
        return None
