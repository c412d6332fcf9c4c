#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Unit tests for the fallback aligner in the ampExtract pipeline.

These tests verify recovery of truncated references against a pool of
directly extracted amplicons, including the coverage acceptance boundary.
"""

from collections import OrderedDict

from ...config import ExtractionSettings
from ...core import FallbackAligner, Provenance
from ...core.fallback_aligner import build_substitution_matrix
from ...utils.sequence_utils import SequenceUtils
from ..conftest import make_reference, make_sequence, FORWARD_PRIMER


def mutate_every_tenth(seq):
    """Substitute the base at every position ending in 5."""
    swap = {"A": "C", "C": "G", "G": "T", "T": "A"}
    return "".join(swap[base] if i % 10 == 5 else base for i, base in enumerate(seq))


class TestFallbackAligner:
    """Test class for FallbackAligner."""

    def setup_method(self):
        self.insert = make_sequence(1000, seed=30)
        self.left = make_sequence(60, seed=31)
        self.pool = OrderedDict([("full", self.insert)])
        self.aligner = FallbackAligner(ExtractionSettings())

    def truncated(self, seq_id, keep):
        """Reference carrying the forward primer site and the first bases of the amplicon."""
        return make_reference(seq_id, self.left + FORWARD_PRIMER + self.insert[:keep])

    def test_substitution_matrix_uses_iupac_sets(self):
        matrix = build_substitution_matrix(1.0, -1.0)
        assert matrix["A", "A"] == 1.0
        assert matrix["R", "A"] == 1.0
        assert matrix["A", "R"] == 1.0
        assert matrix["N", "T"] == 1.0
        assert matrix["R", "C"] == -1.0
        assert matrix["A", "C"] == -1.0

    def test_recovers_truncated_reference(self):
        result = self.aligner.recover(self.truncated("trunc", 950), self.pool)

        assert result.status is Provenance.RECOVERED
        assert result.amplicon == self.insert[:950]
        assert result.reference_id == "full"
        assert abs(result.coverage - 0.95) < 1e-9
        assert result.identity == 1.0
        assert result.reverse_complemented is False

    def test_coverage_at_threshold_is_accepted(self):
        """900 of 1000 amplicon bases covered meets the 0.9 minimum."""
        result = self.aligner.recover(self.truncated("trunc900", 900), self.pool)

        assert result.status is Provenance.RECOVERED
        assert result.coverage == 0.9

    def test_coverage_below_threshold_is_rejected(self):
        """899 of 1000 amplicon bases covered falls short of the 0.9 minimum."""
        result = self.aligner.recover(self.truncated("trunc899", 899), self.pool)

        assert result.status is Provenance.UNRECOVERED
        assert result.amplicon is None
        assert result.coverage == 0.899
        assert "coverage" in result.message

    def test_reverse_stored_reference(self):
        """The recovered amplicon follows the orientation of the matched pool amplicon."""
        stored = SequenceUtils.reverse_complement(self.left + FORWARD_PRIMER + self.insert[:950])
        result = self.aligner.recover(make_reference("trunc_rc", stored), self.pool)

        assert result.status is Provenance.RECOVERED
        assert result.reverse_complemented is True
        assert result.amplicon == self.insert[:950]

    def test_identity_threshold(self):
        mutated = mutate_every_tenth(self.insert[:950])
        reference = make_reference("mutated", self.left + FORWARD_PRIMER + mutated)

        accepted = self.aligner.recover(reference, self.pool)
        assert accepted.status is Provenance.RECOVERED
        assert 0.85 < accepted.identity < 0.95

        strict = FallbackAligner(ExtractionSettings(min_identity=0.95))
        rejected = strict.recover(reference, self.pool)
        assert rejected.status is Provenance.UNRECOVERED
        assert "identity" in rejected.message

    def test_unrelated_sequence_is_not_recovered(self):
        result = self.aligner.recover(make_reference("other", make_sequence(800, seed=32)), self.pool)
        assert result.status is Provenance.UNRECOVERED

    def test_empty_pool(self):
        result = self.aligner.recover(self.truncated("trunc", 950), OrderedDict())
        assert result.status is Provenance.UNRECOVERED
        assert result.message

    def test_best_pool_amplicon_wins(self):
        other = make_sequence(1000, seed=33)
        pool = OrderedDict([("other", other), ("full", self.insert)])

        result = self.aligner.recover(self.truncated("trunc", 950), pool)

        assert result.reference_id == "full"

    def test_ties_go_to_earlier_pool_amplicon(self):
        pool = OrderedDict([("first", self.insert), ("second", self.insert)])

        result = self.aligner.recover(self.truncated("trunc", 950), pool)

        assert result.reference_id == "first"

    def test_result_keeps_species_label(self):
        reference = make_reference("trunc", self.left + FORWARD_PRIMER + self.insert[:950],
                                   species="Pythium ultimum")
        result = self.aligner.recover(reference, self.pool)
        assert result.species == "Pythium ultimum"
