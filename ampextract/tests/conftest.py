#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Shared pytest fixtures for ampExtract tests.

This file contains fixtures that can be reused across multiple test modules.
Sequences are generated from fixed seeds, so every test sees the same data.
"""

import shutil
import logging
import tempfile
import warnings

import numpy as np
import pytest

# Import package modules
from ..config import Config, ExtractionSettings
from ..core.records import PrimerPair, ReferenceSequence
from ..utils.sequence_utils import SequenceUtils
from ..utils.taxon_label import TaxonLabel


# ============== Suppress all logging completely ===============
class NullHandler(logging.Handler):
    def emit(self, record):
        pass


def silence_logger(logger_name):
    """Completely silence a logger by name."""
    logger = logging.getLogger(logger_name)
    logger.setLevel(logging.CRITICAL)
    logger.propagate = False
    logger.handlers = []
    logger.addHandler(NullHandler())


silence_logger("tqdm")
silence_logger("matplotlib")

# Set root logger to only show errors or higher
root_logger = logging.getLogger()
root_logger.setLevel(logging.ERROR)

warnings.filterwarnings("ignore")


def pytest_configure(config):
    """Disable logging and warnings during testing."""
    logging.disable(logging.CRITICAL)
    warnings.simplefilter("ignore")


def pytest_runtest_setup(item):
    """Reset log levels before each test to ensure consistency."""
    logging.disable(logging.CRITICAL)


# ============== Sequence fixtures ===============
FORWARD_PRIMER = "GTTGGTTAGAGCAAAAGACT"
REVERSE_PRIMER = "ATACCTAGAAAGATTCGAACT"


def make_sequence(length, seed):
    """Random ACGT sequence from a fixed seed."""
    rng = np.random.default_rng(seed)
    return "".join(rng.choice(list("ACGT"), size=length))


def make_reference(seq_id, sequence, species=None):
    """ReferenceSequence with an explicit species label."""
    label = TaxonLabel.from_header(seq_id, f"{seq_id} name={species}" if species else seq_id)
    return ReferenceSequence(seq_id=seq_id, sequence=sequence, description=seq_id, label=label)


def make_amplicon_source(insert, left_flank="", right_flank="",
                         forward=FORWARD_PRIMER, reverse=REVERSE_PRIMER):
    """Sequence with an insert flanked by both primer binding sites, stored in forward orientation."""
    return left_flank + forward + insert + SequenceUtils.reverse_complement(reverse) + right_flank


@pytest.fixture
def primer_pair():
    """Unambiguous rps10-style primer pair."""
    return PrimerPair.from_sequences(FORWARD_PRIMER, REVERSE_PRIMER, locus="rps10")


@pytest.fixture
def settings():
    """Serial, quiet settings snapshot with default extraction parameters."""
    return ExtractionSettings(num_processes=1, show_progress=False)


@pytest.fixture
def insert():
    """1000 bp amplicon body."""
    return make_sequence(1000, seed=1)


@pytest.fixture
def flanks():
    """Left and right flanking regions."""
    return make_sequence(60, seed=2), make_sequence(60, seed=3)


@pytest.fixture
def temp_dir():
    """Temporary directory removed after the test."""
    path = tempfile.mkdtemp(prefix="ampextract_test_")
    yield path
    shutil.rmtree(path, ignore_errors=True)


@pytest.fixture
def restore_config():
    """Restore every Config setting after the test."""
    saved = Config.get_all_settings()
    yield Config
    for key, value in saved.items():
        setattr(Config, key, value)
