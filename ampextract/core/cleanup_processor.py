#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Cleanup module for ampExtract pipeline.

Contains functionality for:
1. Optional orientation check against a 5' anchor motif
2. Removal of exact duplicate (species, amplicon) records
3. Deterministic ordering of the retained amplicons

Every result leaves this stage with a terminal state: retained, dropped as
duplicate, unrecovered or ambiguous.
"""

import logging
from typing import List

from ..utils.sequence_utils import SequenceUtils
from .primer_matcher import PrimerMatcher
from .records import Provenance, TerminalState

# Set up module logger
logger = logging.getLogger(__name__)


class CleanupProcessor:
    """
    De-duplicates, orients and sorts extraction results.

    Example:
        >>> retained = CleanupProcessor.process(results, settings)
        >>> [r.seq_id for r in retained]
    """

    @staticmethod
    def anchor_found(anchor, amplicon, search_window):
        """
        Check for an IUPAC motif within the first bases of an amplicon.

        Args:
            anchor: IUPAC motif
            amplicon: Amplicon sequence
            search_window: Number of 5' bases searched; 0 searches the whole amplicon

        Returns:
            bool: True if the motif starts within the search window
        """
        head = amplicon[:search_window] if search_window else amplicon
        return bool(PrimerMatcher.find_primer_sites(anchor, head))

    @classmethod
    def orient(cls, results, anchor, search_window=30):
        """
        Reverse complement amplicons that carry the anchor motif only on the other strand.

        Amplicons matching in neither orientation are left unchanged.

        Args:
            results: ExtractionResult list, modified in place
            anchor: IUPAC motif expected near the 5' end
            search_window: Number of 5' bases searched

        Returns:
            int: Number of reoriented amplicons
        """
        anchor = SequenceUtils.normalize(anchor)
        if not anchor:
            return 0

        reoriented = 0
        unanchored = []

        for result in results:
            if not result.has_amplicon:
                continue
            if cls.anchor_found(anchor, result.amplicon, search_window):
                continue

            flipped = SequenceUtils.reverse_complement(result.amplicon)
            if cls.anchor_found(anchor, flipped, search_window):
                result.amplicon = flipped
                result.reoriented = True
                reoriented += 1
                logger.debug(f"{result.seq_id}: reverse complemented to match anchor {anchor}")
            else:
                unanchored.append(result.seq_id)

        if reoriented:
            logger.info(f"Reoriented {reoriented} amplicons to match anchor motif {anchor}")
        if unanchored:
            logger.warning(
                f"{len(unanchored)} amplicons carry anchor {anchor} in neither orientation: "
                f"{', '.join(unanchored[:5])}{'...' if len(unanchored) > 5 else ''}"
            )

        return reoriented

    @staticmethod
    def deduplicate(results):
        """
        Mark exact duplicate (species, amplicon) records.

        Within each group the record whose seq_id sorts first is retained.

        Args:
            results: ExtractionResult list, terminal states set in place

        Returns:
            List of retained results in seq_id order
        """
        seen = {}
        retained = []
        duplicates = 0

        for result in sorted(results, key=lambda r: r.seq_id):
            if not result.has_amplicon:
                if result.status is Provenance.AMBIGUOUS:
                    result.terminal_state = TerminalState.AMBIGUOUS
                else:
                    result.terminal_state = TerminalState.UNRECOVERED
                continue

            key = (result.species, result.amplicon)
            if key in seen:
                result.terminal_state = TerminalState.DUPLICATE
                result.message = f"duplicate of {seen[key]}"
                duplicates += 1
                continue

            seen[key] = result.seq_id
            result.terminal_state = TerminalState.RETAINED
            retained.append(result)

        logger.debug(f"Deduplication kept {len(retained)} amplicons, dropped {duplicates} duplicates")
        return retained

    @classmethod
    def process(cls, results, settings) -> List:
        """
        Run the cleanup stage on a finished extraction.

        The orientation check runs first, so a reoriented record and its
        correctly oriented copy are recognized as duplicates.

        Args:
            results: All ExtractionResult objects of the run
            settings: ExtractionSettings snapshot

        Returns:
            Retained results sorted by species label, then seq_id
        """
        if settings.orientation_anchor:
            cls.orient(results, settings.orientation_anchor, settings.anchor_search_window)

        retained = cls.deduplicate(results)
        retained.sort(key=lambda r: (r.species, r.seq_id))
        return retained
