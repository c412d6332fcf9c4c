#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Amplicon resolution module for ampExtract pipeline.

Contains functionality for:
1. Building primer-anchored candidate windows on both strands
2. Reducing overlapping candidates to non-overlapping windows
3. Rejecting sequences with more than one window (ambiguous amplification)
4. Primer stripping and optional re-orientation of the amplicon

COORDINATE SYSTEM:
- 0-based, half-open intervals [start, end) on the stored sequence
- A window always starts at a primer hit and ends at the end of a primer
  hit; merging overlapping windows keeps that property because the merged
  bounds are the outermost bounds of anchored windows.
"""

import bisect
import logging
from typing import List, Optional

from ..config import AmbiguousAmplificationError
from ..utils.sequence_utils import SequenceUtils
from .primer_matcher import PrimerMatcher
from .records import AmpliconWindow, ExtractionResult, Provenance

# Set up module logger
logger = logging.getLogger(__name__)

MIXED_STRAND = "+/-"


def _first_at_or_after(positions, minimum):
    index = bisect.bisect_left(positions, minimum)
    return positions[index] if index < len(positions) else None


class AmpliconResolver:
    """
    Resolves primer hits into at most one amplicon per sequence.

    Example:
        >>> result = AmpliconResolver.extract_direct(reference, pair, settings)
        >>> result.status
        <Provenance.DIRECT: 'direct'>
    """

    @staticmethod
    def candidate_windows(sites, forward_length, reverse_length, max_amplicon_length=None):
        """
        Pair primer hits into candidate windows.

        Plus strand: each forward primer hit is paired with the nearest
        downstream hit of the reverse primer's reverse complement. Minus
        strand: each reverse primer hit is paired with the nearest downstream
        hit of the forward primer's reverse complement. Primer sites may not
        overlap. Pairing with the nearest site keeps tandem copies of the
        target as separate windows instead of one spanning product.

        Args:
            sites: PrimerSites for one sequence
            forward_length: Forward primer length
            reverse_length: Reverse primer length
            max_amplicon_length: Optional upper bound on window length

        Returns:
            Sorted list of AmpliconWindow
        """
        windows = []

        for start in sites.forward:
            rc_start = _first_at_or_after(sites.reverse_rc, start + forward_length)
            if rc_start is not None:
                windows.append(AmpliconWindow(
                    start, rc_start + reverse_length, "+", forward_length, reverse_length
                ))

        for start in sites.reverse:
            rc_start = _first_at_or_after(sites.forward_rc, start + reverse_length)
            if rc_start is not None:
                windows.append(AmpliconWindow(
                    start, rc_start + forward_length, "-", reverse_length, forward_length
                ))

        if max_amplicon_length is not None:
            windows = [w for w in windows if w.length <= max_amplicon_length]

        return sorted(windows)

    @staticmethod
    def reduce_windows(windows: List[AmpliconWindow]) -> List[AmpliconWindow]:
        """
        Merge overlapping windows into their outermost span.

        The merged window keeps the primer length of the window supplying
        its start and of the window supplying its end. Windows from both
        strands merging together get the strand marker '+/-'.

        Args:
            windows: Candidate windows

        Returns:
            Non-overlapping windows sorted by start
        """
        reduced = []
        for window in sorted(windows):
            if reduced and reduced[-1].overlaps(window):
                current = reduced[-1]
                if window.end > current.end:
                    end, tail = window.end, window.tail_primer_length
                else:
                    end, tail = current.end, current.tail_primer_length
                strand = current.strand if current.strand == window.strand else MIXED_STRAND
                reduced[-1] = AmpliconWindow(current.start, end, strand, current.head_primer_length, tail)
            else:
                reduced.append(window)
        return reduced

    @classmethod
    def resolve(cls, seq_id, sites, forward_length, reverse_length, max_amplicon_length=None) -> Optional[AmpliconWindow]:
        """
        Resolve primer hits into zero or one window.

        Args:
            seq_id: Sequence identifier, used in the error
            sites: PrimerSites for the sequence
            forward_length: Forward primer length
            reverse_length: Reverse primer length
            max_amplicon_length: Optional upper bound on window length

        A single window merged from both strands (strand '+/-'), as produced
        by long runs of N, is returned like any other window; it is stripped
        by the primer lengths recorded at its two ends.

        Returns:
            The single AmpliconWindow, or None without a complete window

        Raises:
            AmbiguousAmplificationError: If several non-overlapping windows remain
        """
        candidates = cls.candidate_windows(sites, forward_length, reverse_length, max_amplicon_length)
        if not candidates:
            return None

        reduced = cls.reduce_windows(candidates)

        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(f"{seq_id}: {len(candidates)} candidate windows reduced to {len(reduced)}")

        if len(reduced) > 1:
            error = AmbiguousAmplificationError(seq_id, reduced)
            logger.error(str(error))
            raise error

        return reduced[0]

    @staticmethod
    def extract_window(sequence, window, trim_primers=True, orient_to_forward=False):
        """
        Cut the amplicon out of a stored sequence.

        Args:
            sequence: Stored sequence
            window: Primer-anchored AmpliconWindow
            trim_primers: Strip the primer sites at both ends
            orient_to_forward: Reverse complement minus-strand amplicons

        Returns:
            Amplicon sequence, possibly empty when primers abut
        """
        if trim_primers:
            amplicon = sequence[window.insert_start:window.insert_end]
        else:
            amplicon = sequence[window.start:window.end]

        if orient_to_forward and window.strand == "-" and amplicon:
            amplicon = SequenceUtils.reverse_complement(amplicon)

        return amplicon

    @classmethod
    def extract_direct(cls, reference, pair, settings) -> ExtractionResult:
        """
        Extract one reference sequence's amplicon by direct primer search.

        Args:
            reference: ReferenceSequence to search
            pair: PrimerPair defining the target
            settings: ExtractionSettings snapshot

        Returns:
            ExtractionResult with status DIRECT or NO_MATCH

        Raises:
            AmbiguousAmplificationError: If the sequence has several windows
        """
        sites = PrimerMatcher.scan_primer_pair(
            pair, reference.sequence, settings.max_mismatch, settings.ambiguous_target
        )

        window = None
        if not sites.empty:
            window = cls.resolve(
                reference.seq_id, sites, len(pair.forward), len(pair.reverse),
                settings.max_amplicon_length
            )

        if window is None:
            return ExtractionResult(
                seq_id=reference.seq_id,
                status=Provenance.NO_MATCH,
                species=reference.species,
                message="no primer-anchored window",
            )

        amplicon = cls.extract_window(
            reference.sequence, window, settings.trim_primers, settings.orient_to_forward
        )
        if not amplicon:
            return ExtractionResult(
                seq_id=reference.seq_id,
                status=Provenance.NO_MATCH,
                window=window,
                species=reference.species,
                message="primer sites abut, empty amplicon",
            )

        return ExtractionResult(
            seq_id=reference.seq_id,
            status=Provenance.DIRECT,
            amplicon=amplicon,
            window=window,
            species=reference.species,
        )
