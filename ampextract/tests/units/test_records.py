#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Unit tests for the record types of the ampExtract pipeline.
"""

import pickle

import pytest

from ...config import AmbiguousAmplificationError, ConfigError
from ...core import (AmpliconWindow, Direction, ExtractionResult, Primer, PrimerPair,
                     Provenance, ReferenceSequence, TerminalState)


class TestPrimers:
    """Test class for Primer, PrimerPair and Direction."""

    def test_primer_sequence_is_normalized(self):
        primer = Primer("rps10_F", "rps10", Direction.FORWARD, " gttgg ttaga\n")
        assert primer.sequence == "GTTGGTTAGA"
        assert len(primer) == 10

    def test_invalid_primer_sequences(self):
        with pytest.raises(ConfigError):
            Primer("p", "rps10", Direction.FORWARD, "")
        with pytest.raises(ConfigError):
            Primer("p", "rps10", Direction.FORWARD, "ACGX")
        with pytest.raises(ConfigError):
            Primer("p", "rps10", Direction.FORWARD, "AC-G")

    def test_pair_requires_one_primer_per_direction(self):
        forward = Primer("f", "rps10", Direction.FORWARD, "ACGT")
        with pytest.raises(ConfigError):
            PrimerPair(forward, Primer("f2", "rps10", Direction.FORWARD, "TTTT"))

    def test_pair_from_sequences(self):
        pair = PrimerPair.from_sequences("acgt", "ttga", locus="ITS1")
        assert pair.locus == "ITS1"
        assert pair.forward.primer_id == "ITS1_F"
        assert pair.reverse.sequence == "TTGA"
        assert pair.to_dict() == {"locus": "ITS1", "forward": ["ITS1_F", "ACGT"], "reverse": ["ITS1_R", "TTGA"]}

    def test_direction_parse(self):
        assert Direction.parse("Forward") is Direction.FORWARD
        assert Direction.parse(" fwd ") is Direction.FORWARD
        assert Direction.parse("R") is Direction.REVERSE
        with pytest.raises(ConfigError):
            Direction.parse("sideways")


class TestReferenceSequence:
    """Test class for ReferenceSequence."""

    def test_sequence_is_normalized(self):
        reference = ReferenceSequence("seq1", "acgt\nnryk ")
        assert reference.sequence == "ACGTNRYK"
        assert len(reference) == 8
        assert reference.species == "seq1"


class TestAmpliconWindow:
    """Test class for AmpliconWindow."""

    def test_insert_bounds(self):
        window = AmpliconWindow(10, 100, "+", 20, 21)
        assert window.length == 90
        assert window.insert_start == 30
        assert window.insert_end == 79

    def test_overlap(self):
        window = AmpliconWindow(10, 100)
        assert window.overlaps(AmpliconWindow(99, 150))
        assert not window.overlaps(AmpliconWindow(100, 150))


class TestExtractionResult:
    """Test class for ExtractionResult."""

    def test_has_amplicon(self):
        assert ExtractionResult("a", Provenance.DIRECT, amplicon="ACGT").has_amplicon
        assert not ExtractionResult("a", Provenance.DIRECT, amplicon="").has_amplicon
        assert not ExtractionResult("a", Provenance.UNRECOVERED).has_amplicon

    def test_dict_round_trip(self):
        result = ExtractionResult(
            "a", Provenance.DIRECT, amplicon="ACGT", window=AmpliconWindow(0, 45, "-", 21, 20),
            species="Pythium ultimum", terminal_state=TerminalState.RETAINED,
        )
        data = result.to_dict()

        assert data["status"] == "direct"
        assert data["terminal_state"] == "retained"
        assert ExtractionResult.from_dict(data) == result


class TestAmbiguousAmplificationError:
    """Test class for AmbiguousAmplificationError."""

    def test_message_names_sequence_and_windows(self):
        error = AmbiguousAmplificationError("seq9", [AmpliconWindow(0, 50, "+"), AmpliconWindow(80, 130, "-")])
        assert "seq9" in str(error)
        assert "2 non-overlapping amplicon windows" in str(error)
        assert "0-50(+)" in str(error)
        assert "80-130(-)" in str(error)

    def test_survives_pickling(self):
        """Errors raised in worker processes reach the main process intact."""
        error = AmbiguousAmplificationError("seq9", [AmpliconWindow(0, 50, "+")])
        restored = pickle.loads(pickle.dumps(error))
        assert restored.sequence_id == "seq9"
        assert restored.windows == error.windows
        assert str(restored) == str(error)
