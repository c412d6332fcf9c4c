#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Record types for the amplicon extraction pipeline.

COORDINATE SYSTEM:
- All windows are 0-based, half-open intervals [start, end) on the sequence
  as it is stored in the reference database.
"""

import enum
from dataclasses import dataclass, asdict
from typing import Optional

from ..config.exceptions import ConfigError
from ..utils.sequence_utils import SequenceUtils
from ..utils.taxon_label import TaxonLabel


class Provenance(str, enum.Enum):
    """How a reference sequence's amplicon was (or was not) obtained."""

    DIRECT = "direct"
    RECOVERED = "recovered"
    UNRECOVERED = "unrecovered"
    NO_MATCH = "no_match"      # direct search only, before fallback
    AMBIGUOUS = "ambiguous"


class TerminalState(str, enum.Enum):
    RETAINED = "retained"
    DUPLICATE = "dropped_duplicate"
    UNRECOVERED = "unrecovered"
    AMBIGUOUS = "ambiguous"


class Direction(str, enum.Enum):
    FORWARD = "Forward"
    REVERSE = "Reverse"

    @classmethod
    def parse(cls, value):
        """
        Parse a direction from table text ('Forward', 'fwd', 'F', 'reverse', ...).

        Raises:
            ConfigError: If the value names neither direction
        """
        text = str(value).strip().lower()
        if text in ("forward", "fwd", "f", "fw"):
            return cls.FORWARD
        if text in ("reverse", "rev", "r", "rv"):
            return cls.REVERSE
        raise ConfigError(f"Unrecognized primer direction: {value!r}")


@dataclass(frozen=True)
class ReferenceSequence:
    seq_id: str
    sequence: str
    description: str = ""
    label: Optional[TaxonLabel] = None

    def __post_init__(self):
        # Matching, alignment and de-duplication all compare upper-case text
        object.__setattr__(self, 'sequence', SequenceUtils.normalize(self.sequence))

    @property
    def species(self):
        return self.label.species if self.label else self.seq_id

    def __len__(self):
        return len(self.sequence)


@dataclass(frozen=True)
class Primer:
    primer_id: str
    locus: str
    direction: Direction
    sequence: str

    def __post_init__(self):
        sequence = SequenceUtils.normalize(self.sequence)
        if not sequence:
            raise ConfigError(f"Primer {self.primer_id} has an empty sequence")
        invalid = SequenceUtils.invalid_characters(sequence)
        if invalid or '-' in sequence:
            raise ConfigError(
                f"Primer {self.primer_id} contains invalid characters: {', '.join(invalid) or '-'}"
            )
        object.__setattr__(self, 'sequence', sequence)

    def __len__(self):
        return len(self.sequence)


@dataclass(frozen=True)
class PrimerPair:
    """
    One forward and one reverse primer bounding an amplification target.

    Example:
        >>> pair = PrimerPair.from_sequences("GTTGGTTAGAGYARAAGACT", "ATRYYTAGAAAGAYTYGAACT", locus="rps10")
    """

    forward: Primer
    reverse: Primer

    def __post_init__(self):
        if self.forward.direction is not Direction.FORWARD:
            raise ConfigError(f"Primer {self.forward.primer_id} is not a forward primer")
        if self.reverse.direction is not Direction.REVERSE:
            raise ConfigError(f"Primer {self.reverse.primer_id} is not a reverse primer")

    @property
    def locus(self):
        return self.forward.locus

    @classmethod
    def from_sequences(cls, forward, reverse, locus="locus", forward_id=None, reverse_id=None):
        return cls(
            forward=Primer(forward_id or f"{locus}_F", locus, Direction.FORWARD, forward),
            reverse=Primer(reverse_id or f"{locus}_R", locus, Direction.REVERSE, reverse),
        )

    def to_dict(self):
        return {
            "locus": self.locus,
            "forward": [self.forward.primer_id, self.forward.sequence],
            "reverse": [self.reverse.primer_id, self.reverse.sequence],
        }


@dataclass(frozen=True, order=True)
class AmpliconWindow:
    """
    A primer-anchored region of a stored sequence.

    Attributes:
        start: First base of the 5' primer site (inclusive)
        end: Base after the 3' primer site (exclusive)
        strand: '+' if the forward primer binds the stored strand, '-' otherwise
        head_primer_length: Length of the primer site at ``start``
        tail_primer_length: Length of the primer site ending at ``end``
    """

    start: int
    end: int
    strand: str = "+"
    head_primer_length: int = 0
    tail_primer_length: int = 0

    @property
    def length(self):
        return self.end - self.start

    @property
    def insert_start(self):
        return self.start + self.head_primer_length

    @property
    def insert_end(self):
        return self.end - self.tail_primer_length

    def overlaps(self, other):
        """True when windows share at least one base."""
        return self.start < other.end and other.start < self.end


@dataclass
class ExtractionResult:
    """
    Outcome of extracting one reference sequence.

    ``amplicon`` is None unless status is DIRECT or RECOVERED.
    """

    seq_id: str
    status: Provenance
    amplicon: Optional[str] = None
    window: Optional[AmpliconWindow] = None
    reference_id: Optional[str] = None
    coverage: Optional[float] = None
    identity: Optional[float] = None
    score: Optional[float] = None
    reverse_complemented: bool = False
    message: str = ""
    species: str = ""
    terminal_state: Optional[TerminalState] = None
    reoriented: bool = False

    @property
    def has_amplicon(self):
        return self.status in (Provenance.DIRECT, Provenance.RECOVERED) and bool(self.amplicon)

    def to_dict(self):
        data = asdict(self)
        data['status'] = self.status.value
        data['terminal_state'] = self.terminal_state.value if self.terminal_state else None
        return data

    @classmethod
    def from_dict(cls, data):
        data = dict(data)
        data['status'] = Provenance(data['status'])
        if data.get('terminal_state'):
            data['terminal_state'] = TerminalState(data['terminal_state'])
        if data.get('window'):
            data['window'] = AmpliconWindow(**data['window'])
        return cls(**data)
