#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Taxon label parsing for reference sequence headers.

Reference databases encode the organism in the FASTA header in different
ways: ``Phytophthora_infestans_strain_X``, ``name=Pythium ultimum var.
ultimum|strain=...|ncbi_acc=...`` or a plain accession followed by a
description. TaxonLabel extracts the species name used to group, de-duplicate
and sort extracted amplicons.
"""

import re
import logging
from dataclasses import dataclass
from typing import Optional

logger = logging.getLogger(__name__)

RANK_QUALIFIERS = ("subsp.", "var.", "f.", "sp.", "cf.", "aff.")

_KEY_VALUE_NAME = re.compile(r'(?:^|[|;\s])(?:name|organism|species)=([^|;]+)', re.IGNORECASE)


@dataclass(frozen=True)
class TaxonLabel:
    """
    Species-level label derived from a sequence header.

    Attributes:
        species: Normalized species name (spaces, no underscores)
        qualifier: Rank qualifier found in the name, e.g. 'var.', or None
    """

    species: str
    qualifier: Optional[str] = None

    @property
    def is_ambiguous(self):
        """True for labels that do not name a single species (``sp.``, ``cf.``, ``aff.``)."""
        return self.qualifier in ("sp.", "cf.", "aff.") or len(self.species.split()) < 2

    @classmethod
    def from_header(cls, seq_id, description="", pattern=None):
        """
        Derive a label from a FASTA record id and description.

        Args:
            seq_id: Record identifier (first header token)
            description: Full header line without the leading '>'
            pattern: Optional regex with a named group 'species'

        Returns:
            TaxonLabel instance
        """
        header = description or seq_id or ""
        raw = None

        if pattern:
            match = re.search(pattern, header)
            if match and match.groupdict().get('species'):
                raw = match.group('species')
            else:
                logger.debug(f"Label pattern did not match header '{header}', using fallback")

        if raw is None:
            match = _KEY_VALUE_NAME.search(header)
            if match:
                raw = match.group(1)

        if raw is None:
            raw = seq_id or (header.split() or [""])[0]

        species = cls.normalize(raw)
        return cls(species=species, qualifier=cls.find_qualifier(species))

    @staticmethod
    def normalize(name):
        """
        Normalize a raw organism name.

        Example:
            >>> TaxonLabel.normalize("Phytophthora_infestans ")
            'Phytophthora infestans'
        """
        name = name.replace('_', ' ')
        name = re.sub(r'\s+', ' ', name).strip()
        # Qualifiers written without the dot
        name = re.sub(r'\b(subsp|var|sp|cf|aff)\b(?!\.)', r'\1.', name)
        return name

    @staticmethod
    def find_qualifier(species):
        tokens = species.split()
        for token in tokens[1:]:
            if token in RANK_QUALIFIERS:
                return token
        return None
