#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Primer pattern matching module for ampExtract pipeline.

Contains functionality for:
1. IUPAC-aware primer site search on a target sequence
2. Scanning both primers and their reverse complements in one pass

Matching is set intersection per position: a primer base and a target base
match when the sets of nucleotides they stand for overlap. The relation is
symmetric, so an ambiguity code on either side behaves the same way.
"""

import logging
from dataclasses import dataclass
from typing import List

import numpy as np

from ..utils.sequence_utils import SequenceUtils

# Set up module logger
logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PrimerSites:
    """
    Primer hit positions on the stored strand of one sequence.

    Attributes:
        forward: Forward primer, literal
        reverse: Reverse primer, literal
        forward_rc: Reverse complement of the forward primer
        reverse_rc: Reverse complement of the reverse primer
    """

    forward: List[int]
    reverse: List[int]
    forward_rc: List[int]
    reverse_rc: List[int]

    @property
    def empty(self):
        return not (self.forward or self.reverse or self.forward_rc or self.reverse_rc)


class PrimerMatcher:
    """
    Finds primer binding sites with IUPAC ambiguity semantics.

    Example:
        >>> PrimerMatcher.find_primer_sites("ACR", "TTACGTACA")
        [2, 6]
    """

    @staticmethod
    def find_primer_sites(primer, target, max_mismatch=0, ambiguous_target=True):
        """
        Report all start positions where a primer matches a target.

        Args:
            primer: Primer sequence, may contain IUPAC codes
            target: Sequence searched, may contain IUPAC codes
            max_mismatch: Number of incompatible positions tolerated
            ambiguous_target: If False, ambiguity codes in the target match nothing

        Returns:
            Ordered list of zero-based start positions on ``target``
        """
        if not primer or not target or len(primer) > len(target):
            return []

        primer_masks = SequenceUtils.encode_masks(primer)
        if ambiguous_target:
            target_masks = SequenceUtils.encode_masks(target)
        else:
            target_masks = SequenceUtils.literal_masks(target)

        windows = np.lib.stride_tricks.sliding_window_view(target_masks, len(primer_masks))
        compatible = (windows & primer_masks) != 0
        mismatches = len(primer_masks) - compatible.sum(axis=1)
        positions = np.flatnonzero(mismatches <= max_mismatch).tolist()

        if logger.isEnabledFor(logging.DEBUG) and positions:
            logger.debug(f"Primer {primer} matched at {positions[:10]}{'...' if len(positions) > 10 else ''}")

        return positions

    @classmethod
    def scan_primer_pair(cls, pair, target, max_mismatch=0, ambiguous_target=True):
        """
        Search both primers and their reverse complements on a sequence.

        The reverse primer's binding site lies on the complementary strand,
        so on a sequence stored in forward orientation it shows up as a hit
        of the reverse primer's reverse complement downstream of the forward
        primer. Sequences stored in the opposite orientation show the mirror
        image: the literal reverse primer upstream of the forward primer's
        reverse complement.

        Args:
            pair: PrimerPair to search
            target: Stored sequence
            max_mismatch: Number of incompatible positions tolerated per site
            ambiguous_target: Whether target ambiguity codes match

        Returns:
            PrimerSites with the four hit lists
        """
        forward = pair.forward.sequence
        reverse = pair.reverse.sequence

        def search(primer):
            return cls.find_primer_sites(primer, target, max_mismatch, ambiguous_target)

        return PrimerSites(
            forward=search(forward),
            reverse=search(reverse),
            forward_rc=search(SequenceUtils.reverse_complement(forward)),
            reverse_rc=search(SequenceUtils.reverse_complement(reverse)),
        )
