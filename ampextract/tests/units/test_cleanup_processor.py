#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Unit tests for the cleanup stage in the ampExtract pipeline.

These tests verify de-duplication, ordering, the orientation check and the
terminal states assigned to every result.
"""

from ...config import ExtractionSettings
from ...core import CleanupProcessor, ExtractionResult, Provenance, TerminalState
from ...utils.sequence_utils import SequenceUtils

ANCHOR = "TGGATCC"


def direct(seq_id, amplicon, species):
    return ExtractionResult(seq_id=seq_id, status=Provenance.DIRECT, amplicon=amplicon, species=species)


class TestDeduplication:
    """Test class for CleanupProcessor.deduplicate and process."""

    def test_exact_duplicates_keep_first_seq_id(self):
        results = [
            direct("seq_b", "ACGTACGT", "Pythium ultimum"),
            direct("seq_a", "ACGTACGT", "Pythium ultimum"),
        ]

        retained = CleanupProcessor.process(results, ExtractionSettings())

        assert [r.seq_id for r in retained] == ["seq_a"]
        assert results[0].terminal_state is TerminalState.DUPLICATE
        assert results[1].terminal_state is TerminalState.RETAINED
        assert "seq_a" in results[0].message

    def test_same_amplicon_different_species_is_kept(self):
        results = [
            direct("seq_a", "ACGTACGT", "Pythium ultimum"),
            direct("seq_b", "ACGTACGT", "Pythium irregulare"),
        ]

        retained = CleanupProcessor.process(results, ExtractionSettings())

        assert len(retained) == 2

    def test_sorted_by_species_then_seq_id(self):
        results = [
            direct("seq_3", "AAAA", "Pythium ultimum"),
            direct("seq_1", "CCCC", "Phytophthora sojae"),
            direct("seq_2", "GGGG", "Pythium ultimum"),
            direct("seq_0", "TTTT", "Phytophthora sojae"),
        ]

        retained = CleanupProcessor.process(results, ExtractionSettings())

        assert [r.seq_id for r in retained] == ["seq_0", "seq_1", "seq_2", "seq_3"]

    def test_terminal_states_without_amplicon(self):
        results = [
            ExtractionResult(seq_id="u", status=Provenance.UNRECOVERED, species="A b"),
            ExtractionResult(seq_id="x", status=Provenance.AMBIGUOUS, species="A b"),
            ExtractionResult(seq_id="r", status=Provenance.RECOVERED, amplicon="ACGT", species="A b"),
        ]

        retained = CleanupProcessor.process(results, ExtractionSettings())

        assert [r.seq_id for r in retained] == ["r"]
        assert results[0].terminal_state is TerminalState.UNRECOVERED
        assert results[1].terminal_state is TerminalState.AMBIGUOUS
        assert results[2].terminal_state is TerminalState.RETAINED


class TestOrientation:
    """Test class for the anchor-based orientation check."""

    def test_reverse_oriented_amplicon_is_flipped(self):
        amplicon = ANCHOR + "ACACACACACGTTTGCA"
        flipped = SequenceUtils.reverse_complement(amplicon)
        results = [direct("bad", flipped, "Pythium ultimum")]

        count = CleanupProcessor.orient(results, ANCHOR, search_window=10)

        assert count == 1
        assert results[0].amplicon == amplicon
        assert results[0].reoriented is True

    def test_correct_orientation_is_unchanged(self):
        amplicon = "AC" + ANCHOR + "ACACACACACGTTTGCA"
        results = [direct("good", amplicon, "Pythium ultimum")]

        assert CleanupProcessor.orient(results, ANCHOR, search_window=10) == 0
        assert results[0].amplicon == amplicon
        assert results[0].reoriented is False

    def test_no_anchor_in_either_orientation(self):
        amplicon = "ACACACACACACACACACAC"
        results = [direct("none", amplicon, "Pythium ultimum")]

        assert CleanupProcessor.orient(results, ANCHOR, search_window=10) == 0
        assert results[0].amplicon == amplicon

    def test_orientation_runs_before_deduplication(self):
        """A flipped copy of a correctly oriented amplicon is recognized as duplicate."""
        amplicon = ANCHOR + "ACACACACACGTTTGCA"
        results = [
            direct("seq_a", amplicon, "Pythium ultimum"),
            direct("seq_b", SequenceUtils.reverse_complement(amplicon), "Pythium ultimum"),
        ]
        settings = ExtractionSettings(orientation_anchor=ANCHOR, anchor_search_window=10)

        retained = CleanupProcessor.process(results, settings)

        assert [r.seq_id for r in retained] == ["seq_a"]
        assert results[1].reoriented is True
        assert results[1].terminal_state is TerminalState.DUPLICATE

    def test_anchor_accepts_iupac_codes(self):
        amplicon = "TGGATCC" + "ACACACACAC"
        assert CleanupProcessor.anchor_found("TGRATCC", amplicon, 10)
