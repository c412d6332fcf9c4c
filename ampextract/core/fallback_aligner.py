#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Fallback alignment module for ampExtract pipeline.

Recovers an approximate amplicon for reference sequences that direct primer
search could not resolve, typically sequences truncated before one primer
site. Each such sequence is aligned against every directly extracted
amplicon; the best scoring alignment defines the recovered region.

The alignment is semi-global: end gaps are free on both sequences, so the
reference sequence may overhang the amplicon (flanking regions, primer
sites) and the amplicon may overhang the reference sequence (truncation)
without penalty. Internal gaps and mismatches are scored.
"""

import logging
from typing import Dict, Optional, Tuple

from Bio.Align import PairwiseAligner, substitution_matrices

from ..config import AlignmentError
from ..utils.sequence_utils import SequenceUtils, IUPAC_MASKS
from .records import ExtractionResult, Provenance

# Set up module logger
logger = logging.getLogger(__name__)

ALIGNMENT_ALPHABET = "".join(sorted(IUPAC_MASKS))


def build_substitution_matrix(match_score, mismatch_score):
    """
    Build an IUPAC-aware substitution matrix.

    Two letters score as a match when the nucleotide sets they represent
    overlap, consistent with primer matching.

    Args:
        match_score: Score for compatible letters
        mismatch_score: Score for incompatible letters

    Returns:
        Bio.Align.substitution_matrices.Array
    """
    matrix = substitution_matrices.Array(alphabet=ALIGNMENT_ALPHABET, dims=2)
    for a in ALIGNMENT_ALPHABET:
        for b in ALIGNMENT_ALPHABET:
            matrix[a, b] = match_score if SequenceUtils.bases_compatible(a, b) else mismatch_score
    return matrix


class FallbackAligner:
    """
    Aligns unmatched sequences against a pool of extracted amplicons.

    Example:
        >>> aligner = FallbackAligner(settings)
        >>> result = aligner.recover(reference, {"seq1": "ACGT..."})
        >>> result.status, result.coverage
    """

    def __init__(self, settings):
        """
        Initialize the aligner from an ExtractionSettings snapshot.

        Args:
            settings: ExtractionSettings with scoring and acceptance thresholds
        """
        self.settings = settings
        self.aligner = PairwiseAligner()
        self.aligner.mode = "global"
        self.aligner.substitution_matrix = build_substitution_matrix(
            settings.match_score, settings.mismatch_score
        )
        self.aligner.open_gap_score = settings.open_gap_score
        self.aligner.extend_gap_score = settings.extend_gap_score
        self.aligner.target_end_gap_score = 0.0
        self.aligner.query_end_gap_score = 0.0

    @staticmethod
    def _alignable(sequence):
        """Replace characters outside the alignment alphabet with N."""
        return "".join(base if base in IUPAC_MASKS else "N" for base in sequence.upper())

    def best_hit(self, sequence, pool: Dict[str, str]) -> Optional[Tuple[float, str, bool]]:
        """
        Find the pool amplicon and orientation with the best alignment score.

        Ties keep the earlier pool entry and the stored orientation.

        Args:
            sequence: Unmatched sequence (alignable alphabet)
            pool: Mapping of seq_id to amplicon, iterated in order

        Returns:
            Tuple (score, reference_id, reverse_complemented), or None for an empty pool
        """
        orientations = [(False, sequence)]
        reverse = SequenceUtils.reverse_complement(sequence)
        if reverse != sequence:
            orientations.append((True, reverse))

        best = None
        for reference_id, amplicon in pool.items():
            for is_reversed, query in orientations:
                score = self.aligner.score(amplicon, query)
                if best is None or score > best[0]:
                    best = (score, reference_id, is_reversed)
        return best

    def recover(self, reference, pool: Dict[str, str]) -> ExtractionResult:
        """
        Recover an amplicon for a sequence lacking a direct match.

        Args:
            reference: ReferenceSequence without a direct match
            pool: Mapping of seq_id to directly extracted amplicon

        Returns:
            ExtractionResult with status RECOVERED or UNRECOVERED

        Raises:
            AlignmentError: If the aligner fails
        """
        def unrecovered(message, **stats):
            logger.debug(f"{reference.seq_id}: not recovered ({message})")
            return ExtractionResult(
                seq_id=reference.seq_id,
                status=Provenance.UNRECOVERED,
                species=reference.species,
                message=message,
                **stats
            )

        if not pool:
            return unrecovered("no directly extracted amplicons to align against")

        sequence = self._alignable(reference.sequence)
        if not sequence:
            return unrecovered("empty sequence")

        try:
            hit = self.best_hit(sequence, pool)
            score, reference_id, is_reversed = hit
            query = SequenceUtils.reverse_complement(sequence) if is_reversed else sequence
            target = pool[reference_id]
            alignment = self.aligner.align(target, query)[0]
        except (ValueError, OverflowError) as e:
            error_msg = f"Alignment failed for sequence {reference.seq_id}"
            logger.error(error_msg)
            logger.debug(f"Error details: {str(e)}", exc_info=True)
            raise AlignmentError(error_msg) from e

        stats = self.alignment_statistics(alignment, target, query)
        if stats is None:
            return unrecovered("no aligned region", reference_id=reference_id, score=score)

        recovered = query[stats["query_start"]:stats["query_end"]].replace("-", "")
        coverage = stats["coverage"]
        identity = stats["identity"]

        common = dict(
            reference_id=reference_id,
            coverage=coverage,
            identity=identity,
            score=score,
            reverse_complemented=is_reversed,
        )

        if not recovered:
            return unrecovered("empty recovered sequence", **common)

        if coverage < self.settings.min_coverage:
            return unrecovered(
                f"coverage {coverage:.3f} below minimum {self.settings.min_coverage:.3f}", **common
            )

        if identity < self.settings.min_identity:
            return unrecovered(
                f"identity {identity:.3f} below minimum {self.settings.min_identity:.3f}", **common
            )

        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(
                f"{reference.seq_id}: recovered {len(recovered)} bp against {reference_id} "
                f"(coverage={coverage:.3f}, identity={identity:.3f}, rc={is_reversed})"
            )

        return ExtractionResult(
            seq_id=reference.seq_id,
            status=Provenance.RECOVERED,
            amplicon=recovered,
            species=reference.species,
            **common
        )

    @staticmethod
    def alignment_statistics(alignment, target, query):
        """
        Summarize the aligned region of a pairwise alignment.

        The aligned region runs from the first to the last column in which
        both sequences have a base; end gaps outside it are ignored.

        Args:
            alignment: Bio.Align.Alignment of target (amplicon) and query
            target: Target sequence string
            query: Query sequence string

        Returns:
            Dictionary with query_start, query_end, target_start, target_end,
            coverage and identity, or None if no column is aligned
        """
        target_blocks, query_blocks = alignment.aligned
        if len(target_blocks) == 0:
            return None

        target_start, target_end = int(target_blocks[0][0]), int(target_blocks[-1][1])
        query_start, query_end = int(query_blocks[0][0]), int(query_blocks[-1][1])

        aligned_pairs = 0
        identical = 0
        for (t_start, t_end), (q_start, q_end) in zip(target_blocks, query_blocks):
            t_segment = target[int(t_start):int(t_end)]
            q_segment = query[int(q_start):int(q_end)]
            aligned_pairs += len(t_segment)
            identical += sum(1 for a, b in zip(t_segment, q_segment) if a == b)

        target_span = target_end - target_start
        query_span = query_end - query_start
        # Aligned pairs plus internal gap columns on either side
        columns = aligned_pairs + (target_span - aligned_pairs) + (query_span - aligned_pairs)

        return {
            "target_start": target_start,
            "target_end": target_end,
            "query_start": query_start,
            "query_end": query_end,
            "coverage": target_span / len(target) if target else 0.0,
            "identity": identical / columns if columns else 0.0,
        }
