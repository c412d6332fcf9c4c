#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Unit tests for file input and output in the ampExtract pipeline.
"""

import os
from unittest.mock import patch

import pandas as pd
import pytest

from ...config import ConfigError, FileError, FileFormatError
from ...core import Direction
from ...utils import file_io
from ...utils.file_io import FileIO


def write_text(directory, name, text):
    path = os.path.join(directory, name)
    with open(path, 'w') as f:
        f.write(text)
    return path


PRIMER_ROWS = [
    ["rps10_F", "rps10", "Forward", "GTTGGTTAGAGYARAAGACT"],
    ["rps10_R", "rps10", "Reverse", "ATRYYTAGAAAGAYTYGAACT"],
    ["ITS6", "ITS", "forward", "GAAGGTGAAGTCGTAACAAGG"],
    ["ITS4", "ITS", "reverse", "TCCTCCGCTTATTGATATGC"],
]


class TestLoadFasta:
    """Test class for FileIO.load_fasta."""

    def test_records_in_file_order(self, temp_dir):
        path = write_text(temp_dir, "refs.fasta", (
            ">seq2 name=Pythium ultimum|strain=A\nacgt\nACGT\n"
            ">seq1 name=Phytophthora sojae\nGGGG\n"
        ))

        references = FileIO.load_fasta(path)

        assert [r.seq_id for r in references] == ["seq2", "seq1"]
        assert references[0].sequence == "ACGTACGT"
        assert references[0].species == "Pythium ultimum"
        assert references[1].species == "Phytophthora sojae"

    def test_gaps_removed_and_invalid_characters_masked(self, temp_dir):
        path = write_text(temp_dir, "refs.fasta", ">seq1\nAC-GT..RYX*\n")

        references = FileIO.load_fasta(path)

        assert references[0].sequence == "ACGTRYNN"

    def test_label_pattern(self, temp_dir):
        path = write_text(temp_dir, "refs.fasta", ">AB1|Pythium_ultimum|CBS\nACGT\n")

        references = FileIO.load_fasta(path, label_pattern=r"\|(?P<species>[^|]+)\|")

        assert references[0].species == "Pythium ultimum"

    def test_partial_species_labels_are_reported(self, temp_dir):
        path = write_text(temp_dir, "refs.fasta", (
            ">seq1 name=Pythium ultimum\nACGT\n"
            ">seq2 name=Pythium sp.\nACGT\n"
            ">seq3 name=Phytophthora cf. sojae\nACGT\n"
        ))

        with patch.object(file_io, "logger") as mock_logger:
            FileIO.load_fasta(path)

        mock_logger.warning.assert_called_once()
        message = mock_logger.warning.call_args[0][0]
        assert message.startswith("2 sequence(s) are not labelled to species level")
        assert "seq2" in message

    def test_species_labels_not_reported(self, temp_dir):
        path = write_text(temp_dir, "refs.fasta", ">seq1 name=Pythium ultimum\nACGT\n")

        with patch.object(file_io, "logger") as mock_logger:
            FileIO.load_fasta(path)

        mock_logger.warning.assert_not_called()

    def test_duplicate_identifiers(self, temp_dir):
        path = write_text(temp_dir, "refs.fasta", ">seq1\nACGT\n>seq1\nGGGG\n")
        with pytest.raises(FileFormatError):
            FileIO.load_fasta(path)

    def test_empty_file(self, temp_dir):
        path = write_text(temp_dir, "refs.fasta", "")
        with pytest.raises(FileFormatError):
            FileIO.load_fasta(path)

    def test_missing_file(self, temp_dir):
        with pytest.raises(FileError):
            FileIO.load_fasta(os.path.join(temp_dir, "missing.fasta"))


class TestPrimerTable:
    """Test class for primer table loading and pair selection."""

    def test_csv_with_aliased_columns(self, temp_dir):
        path = os.path.join(temp_dir, "primers.csv")
        pd.DataFrame(PRIMER_ROWS, columns=["Primer Name", "Gene", "Orientation", "Seq"]).to_csv(path, index=False)

        df = FileIO.load_primer_table(path)

        assert list(df.columns) == ["primer_id", "locus", "direction", "sequence"]
        assert len(df) == 4

    def test_tsv(self, temp_dir):
        lines = ["primer_id\tlocus\tdirection\tsequence"] + ["\t".join(row) for row in PRIMER_ROWS]
        path = write_text(temp_dir, "primers.tsv", "\n".join(lines) + "\n")

        df = FileIO.load_primer_table(path)

        assert df.loc[0, "sequence"] == "GTTGGTTAGAGYARAAGACT"

    def test_excel(self, temp_dir):
        path = os.path.join(temp_dir, "primers.xlsx")
        pd.DataFrame(PRIMER_ROWS, columns=["primer_id", "locus", "direction", "sequence"]).to_excel(path, index=False)

        df = FileIO.load_primer_table(path)

        assert len(df) == 4

    def test_missing_columns(self, temp_dir):
        path = write_text(temp_dir, "primers.csv", "primer_id,sequence\np1,ACGT\n")
        with pytest.raises(FileFormatError):
            FileIO.load_primer_table(path)

    def test_select_pair(self):
        df = pd.DataFrame(PRIMER_ROWS, columns=["primer_id", "locus", "direction", "sequence"])

        pair = FileIO.select_primer_pair(df, "its")

        assert pair.locus == "ITS"
        assert pair.forward.primer_id == "ITS6"
        assert pair.reverse.direction is Direction.REVERSE

    def test_select_pair_needs_locus_for_multi_locus_table(self):
        df = pd.DataFrame(PRIMER_ROWS, columns=["primer_id", "locus", "direction", "sequence"])
        with pytest.raises(ConfigError):
            FileIO.select_primer_pair(df)

    def test_select_single_locus_without_name(self):
        df = pd.DataFrame(PRIMER_ROWS[:2], columns=["primer_id", "locus", "direction", "sequence"])
        assert FileIO.select_primer_pair(df).locus == "rps10"

    def test_unknown_locus(self):
        df = pd.DataFrame(PRIMER_ROWS, columns=["primer_id", "locus", "direction", "sequence"])
        with pytest.raises(ConfigError):
            FileIO.select_primer_pair(df, "COI")

    def test_two_forward_primers(self):
        rows = PRIMER_ROWS[:2] + [["rps10_F2", "rps10", "F", "ACGTACGT"]]
        df = pd.DataFrame(rows, columns=["primer_id", "locus", "direction", "sequence"])
        with pytest.raises(ConfigError):
            FileIO.select_primer_pair(df, "rps10")


class TestOutputs:
    """Test class for output writing."""

    def test_save_fasta_wraps_lines(self, temp_dir):
        path = os.path.join(temp_dir, "out.fasta")

        FileIO.save_fasta({"seq1 Pythium ultimum": "A" * 130, "empty": ""}, path)

        with open(path) as f:
            lines = f.read().splitlines()
        assert lines == [">seq1 Pythium ultimum", "A" * 60, "A" * 60, "A" * 10]

    def test_output_paths(self, temp_dir):
        out_dir = os.path.join(temp_dir, "results")

        paths = FileIO.output_paths("rps10", out_dir)

        assert os.path.isdir(out_dir)
        assert paths["fasta"] == os.path.join(out_dir, "rps10_amplicons.fasta")
        assert paths["provenance"] == os.path.join(out_dir, "rps10_provenance.csv")

    def test_save_provenance(self, temp_dir):
        path = os.path.join(temp_dir, "prov.csv")
        df = pd.DataFrame([{"seq_id": "seq1", "status": "direct"}])

        FileIO.save_provenance(df, path)

        assert pd.read_csv(path).to_dict("records") == [{"seq_id": "seq1", "status": "direct"}]
