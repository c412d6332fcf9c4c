#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
File I/O module for ampExtract pipeline.

Contains functionality for:
1. Reference FASTA loading into ReferenceSequence records
2. Primer table loading (CSV, TSV, Excel) and primer pair selection
3. Amplicon FASTA and provenance table writing

All inputs are fully materialized in memory before extraction starts.
"""

import os
import re
import logging
from typing import Dict, List

import pandas as pd
from Bio import SeqIO

from ..config import ConfigError, FileError, FileFormatError
from ..core.records import Direction, Primer, PrimerPair, ReferenceSequence
from .sequence_utils import SequenceUtils
from .taxon_label import TaxonLabel

# Set up module logger
logger = logging.getLogger(__name__)

PRIMER_TABLE_COLUMNS = ["primer_id", "locus", "direction", "sequence"]

# Alternative spellings seen in primer tables
_COLUMN_ALIASES = {
    "id": "primer_id",
    "primer": "primer_id",
    "name": "primer_id",
    "primer_name": "primer_id",
    "marker": "locus",
    "gene": "locus",
    "orientation": "direction",
    "seq": "sequence",
    "primer_sequence": "sequence",
}


class FileIO:
    """
    Reading and writing of the pipeline's input and output files.

    Example:
        >>> references = FileIO.load_fasta("rps10_db.fasta")
        >>> pair = FileIO.select_primer_pair(FileIO.load_primer_table("primers.csv"), "rps10")
    """

    @staticmethod
    def _check_exists(filepath, kind):
        if not os.path.exists(filepath):
            error_msg = f"{kind} file not found: {filepath}"
            logger.error(error_msg)
            raise FileError(error_msg)

    @staticmethod
    def clean_sequence(seq_id, sequence):
        """
        Upper-case a stored sequence, drop alignment gaps and mask invalid characters.

        Args:
            seq_id: Record identifier, used in warnings
            sequence: Raw sequence text

        Returns:
            Cleaned sequence over the IUPAC alphabet
        """
        sequence = SequenceUtils.normalize(sequence).replace('-', '').replace('.', '')
        invalid = SequenceUtils.invalid_characters(sequence)
        if invalid:
            logger.warning(
                f"Sequence {seq_id} contains invalid characters {', '.join(invalid)}; replaced with N"
            )
            sequence = re.sub(f"[{re.escape(''.join(invalid))}]", 'N', sequence)
        return sequence

    @classmethod
    def load_fasta(cls, filepath, label_pattern=None) -> List[ReferenceSequence]:
        """
        Load reference sequences from a FASTA file.

        Args:
            filepath: Path to the FASTA file
            label_pattern: Optional regex with a 'species' group applied to headers

        Returns:
            List of ReferenceSequence in file order

        Raises:
            FileError: If the FASTA file doesn't exist or cannot be read
            FileFormatError: If the file has no records or duplicate identifiers
        """
        cls._check_exists(filepath, "FASTA")

        references = []
        seen = set()

        try:
            with open(filepath, 'r') as handle:
                for record in SeqIO.parse(handle, "fasta"):
                    if record.id in seen:
                        error_msg = f"Duplicate sequence identifier in {filepath}: {record.id}"
                        logger.error(error_msg)
                        raise FileFormatError(error_msg)
                    seen.add(record.id)

                    sequence = cls.clean_sequence(record.id, str(record.seq))
                    if not sequence:
                        logger.warning(f"Sequence {record.id} is empty")

                    label = TaxonLabel.from_header(record.id, record.description, label_pattern)
                    references.append(ReferenceSequence(
                        seq_id=record.id,
                        sequence=sequence,
                        description=record.description,
                        label=label,
                    ))
        except FileFormatError:
            raise
        except (OSError, IOError) as e:
            error_msg = f"Error reading FASTA file {os.path.abspath(filepath)}: {str(e)}"
            logger.error(error_msg)
            logger.debug(f"Error details: {str(e)}", exc_info=True)
            raise FileError(error_msg) from e
        except Exception as e:
            error_msg = f"Error parsing FASTA file {os.path.abspath(filepath)}: {str(e)}"
            logger.error(error_msg)
            logger.debug(f"Error details: {str(e)}", exc_info=True)
            raise FileFormatError(error_msg) from e

        if not references:
            error_msg = f"No sequences found in FASTA file {filepath}"
            logger.error(error_msg)
            raise FileFormatError(error_msg)

        ambiguous = [r.seq_id for r in references if r.label and r.label.is_ambiguous]
        if ambiguous:
            logger.warning(
                f"{len(ambiguous)} sequence(s) are not labelled to species level and will be "
                f"grouped under their partial name (e.g. {ambiguous[0]})"
            )

        logger.debug(f"Successfully loaded {len(references)} sequences from FASTA file")
        return references

    @staticmethod
    def normalize_column(name):
        """
        Normalize a primer table column header.

        Example:
            >>> FileIO.normalize_column(" Primer ID ")
            'primer_id'
        """
        key = re.sub(r'[\s\-]+', '_', str(name).strip().lower())
        return _COLUMN_ALIASES.get(key, key)

    @classmethod
    def load_primer_table(cls, filepath) -> pd.DataFrame:
        """
        Load a primer table from CSV, TSV or Excel.

        Args:
            filepath: Path to the primer table

        Returns:
            DataFrame with columns primer_id, locus, direction, sequence

        Raises:
            FileError: If the file doesn't exist
            FileFormatError: If the file cannot be parsed or lacks required columns
        """
        cls._check_exists(filepath, "Primer table")

        lower = filepath.lower()
        try:
            if lower.endswith(('.xlsx', '.xls')):
                df = pd.read_excel(filepath, dtype=str)
            elif lower.endswith(('.tsv', '.tab', '.txt')):
                df = pd.read_csv(filepath, sep='\t', dtype=str)
            else:
                df = pd.read_csv(filepath, dtype=str)
        except Exception as e:
            error_msg = f"Error reading primer table {filepath}: {str(e)}"
            logger.error(error_msg)
            logger.debug(f"Error details: {str(e)}", exc_info=True)
            raise FileFormatError(error_msg) from e

        df = df.rename(columns=cls.normalize_column)
        df = df.dropna(axis=0, how='all')

        missing = [col for col in PRIMER_TABLE_COLUMNS if col not in df.columns]
        if missing:
            error_msg = f"Primer table {filepath} lacks required columns: {', '.join(missing)}"
            logger.error(error_msg)
            logger.debug(f"Available columns: {df.columns.tolist()}")
            raise FileFormatError(error_msg)

        df = df[PRIMER_TABLE_COLUMNS].fillna("")
        for col in PRIMER_TABLE_COLUMNS:
            df[col] = df[col].astype(str).str.strip()

        logger.debug(f"Loaded {len(df)} primers from {filepath}")
        return df.reset_index(drop=True)

    @staticmethod
    def select_primer_pair(df, locus=None) -> PrimerPair:
        """
        Build the primer pair for one locus from a primer table.

        Args:
            df: DataFrame from load_primer_table
            locus: Locus name (case-insensitive); may be omitted when the
                table holds a single locus

        Returns:
            PrimerPair for the locus

        Raises:
            ConfigError: If the locus is unknown or does not have exactly one
                forward and one reverse primer
        """
        loci = sorted(set(df["locus"]))
        if locus is None:
            if len(loci) != 1:
                error_msg = f"Primer table holds several loci ({', '.join(loci)}); choose one with --locus"
                logger.error(error_msg)
                raise ConfigError(error_msg)
            locus = loci[0]

        rows = df[df["locus"].str.lower() == str(locus).lower()]
        if rows.empty:
            error_msg = f"Locus '{locus}' not found in primer table (available: {', '.join(loci)})"
            logger.error(error_msg)
            raise ConfigError(error_msg)

        primers = {Direction.FORWARD: [], Direction.REVERSE: []}
        for _, row in rows.iterrows():
            direction = Direction.parse(row["direction"])
            primers[direction].append(Primer(row["primer_id"], row["locus"], direction, row["sequence"]))

        for direction, found in primers.items():
            if len(found) != 1:
                error_msg = (
                    f"Locus '{locus}' needs exactly one {direction.value.lower()} primer, "
                    f"found {len(found)}"
                )
                logger.error(error_msg)
                raise ConfigError(error_msg)

        pair = PrimerPair(primers[Direction.FORWARD][0], primers[Direction.REVERSE][0])
        logger.debug(
            f"Selected primer pair for {pair.locus}: "
            f"{pair.forward.primer_id}={pair.forward.sequence}, {pair.reverse.primer_id}={pair.reverse.sequence}"
        )
        return pair

    @staticmethod
    def save_fasta(sequences: Dict[str, str], filepath):
        """
        Save sequences to a FASTA file.

        Args:
            sequences: Dictionary of header to sequence, written in order
            filepath: Path to save the FASTA file

        Raises:
            FileFormatError: If there's an error writing the FASTA file
        """
        if not sequences:
            logger.warning("No sequences provided to save_fasta")

        try:
            with open(filepath, 'w') as f:
                for header, sequence in sequences.items():
                    if not header or not sequence:
                        logger.warning(f"Skipping invalid sequence: id='{header}', seq_len={len(sequence) if sequence else 0}")
                        continue

                    f.write(f">{header}\n")
                    # Write sequence in chunks of 60 characters for readability
                    for i in range(0, len(sequence), 60):
                        f.write(f"{sequence[i:i+60]}\n")

        except (OSError, IOError) as e:
            error_msg = f"Error writing FASTA file {filepath}: {str(e)}"
            logger.error(error_msg)
            logger.debug(f"Error details: {str(e)}", exc_info=True)
            raise FileFormatError(error_msg) from e

        logger.debug(f"Successfully saved FASTA file: {filepath}")

    @staticmethod
    def save_provenance(df, filepath):
        """
        Save the per-sequence provenance table as CSV.

        Args:
            df: DataFrame from ExtractionReport.to_dataframe
            filepath: Output path

        Raises:
            FileFormatError: If the table cannot be written
        """
        try:
            df.to_csv(filepath, index=False)
        except (OSError, IOError) as e:
            error_msg = f"Error writing provenance table {filepath}: {str(e)}"
            logger.error(error_msg)
            logger.debug(f"Error details: {str(e)}", exc_info=True)
            raise FileFormatError(error_msg) from e

        logger.debug(f"Saved provenance table with {len(df)} rows: {filepath}")

    @staticmethod
    def output_paths(prefix, output_dir=None) -> Dict[str, str]:
        """
        Build the output file paths of a run.

        Args:
            prefix: File name prefix, usually the locus
            output_dir: Target directory, created if missing; defaults to the
                current directory

        Returns:
            Dictionary with 'fasta' and 'provenance' paths

        Raises:
            FileError: If the directory cannot be created
        """
        output_dir = output_dir or os.getcwd()
        try:
            os.makedirs(output_dir, exist_ok=True)
        except OSError as e:
            error_msg = f"Failed to create output directory {output_dir}: {str(e)}"
            logger.error(error_msg)
            logger.debug(f"Error details: {str(e)}", exc_info=True)
            raise FileError(error_msg) from e

        return {
            "fasta": os.path.join(output_dir, f"{prefix}_amplicons.fasta"),
            "provenance": os.path.join(output_dir, f"{prefix}_provenance.csv"),
        }
