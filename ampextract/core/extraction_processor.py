#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Amplicon extraction workflow for ampExtract pipeline.

Contains functionality for:
1. Parallel direct primer search over all reference sequences
2. Parallel fallback alignment of unmatched sequences against the pool of
   directly extracted amplicons, after the direct phase has finished
3. Cleanup (orientation check, de-duplication, ordering)
4. Run summaries and the per-sequence provenance table

Worker processes receive only immutable inputs (reference sequences, the
primer pair, the settings snapshot and the amplicon pool) and return
results; output order always follows input order.
"""

import logging
from collections import Counter, OrderedDict
from concurrent.futures import ProcessPoolExecutor
from dataclasses import dataclass, field
from typing import Dict, List, Optional

import numpy as np
import pandas as pd
from tqdm import tqdm

from ..config import (
    Config,
    ExtractionSettings,
    AmbiguousAmplificationError,
    AmpExtractError,
    WorkflowError,
)
from ..utils.common_utils import CommonUtils
from .amplicon_resolver import AmpliconResolver
from .cleanup_processor import CleanupProcessor
from .fallback_aligner import FallbackAligner
from .records import ExtractionResult, PrimerPair, Provenance, TerminalState

# Set up module logger
logger = logging.getLogger(__name__)

PROVENANCE_COLUMNS = [
    "seq_id", "species", "status", "terminal_state", "amplicon_length", "strand",
    "window_start", "window_end", "reference_id", "coverage", "identity",
    "reverse_complemented", "reoriented", "message",
]


def _direct_batch(references, pair, settings):
    """
    Direct primer search over one batch of references.

    Runs in worker processes. With halting enabled an ambiguous sequence
    raises and stops the batch; otherwise it is recorded as AMBIGUOUS.
    """
    results = []
    for reference in references:
        try:
            results.append(AmpliconResolver.extract_direct(reference, pair, settings))
        except AmbiguousAmplificationError as e:
            if settings.halt_on_ambiguous:
                raise
            results.append(ExtractionResult(
                seq_id=reference.seq_id,
                status=Provenance.AMBIGUOUS,
                species=reference.species,
                message=str(e),
            ))
    return results


def _fallback_batch(references, pool, settings):
    """Fallback alignment of one batch of unmatched references. Runs in worker processes."""
    aligner = FallbackAligner(settings)
    return [aligner.recover(reference, pool) for reference in references]


@dataclass
class ExtractionReport:
    """
    Outcome of one extraction run.

    Attributes:
        pair: Primer pair used
        settings: Settings snapshot used
        results: One result per input sequence, in input order
        retained: Retained results, sorted by species label then seq_id
        from_cache: True if the results were loaded from the result cache
    """

    pair: PrimerPair
    settings: ExtractionSettings
    results: List[ExtractionResult]
    retained: List[ExtractionResult] = field(default_factory=list)
    from_cache: bool = False

    def counts(self) -> Dict[str, int]:
        """
        Count results per provenance status, plus retained and dropped duplicates.

        Returns:
            Dictionary keyed by Provenance and TerminalState values, and 'total'
        """
        counts = Counter(result.status.value for result in self.results)
        counts.update(
            result.terminal_state.value for result in self.results
            if result.terminal_state in (TerminalState.RETAINED, TerminalState.DUPLICATE)
        )
        counts["total"] = len(self.results)
        return dict(counts)

    def amplicons(self) -> "OrderedDict[str, str]":
        """Retained amplicons keyed by seq_id, in output order."""
        return OrderedDict((r.seq_id, r.amplicon) for r in self.retained)

    def fasta_records(self) -> "OrderedDict[str, str]":
        """Retained amplicons keyed by FASTA header ('seq_id species')."""
        return OrderedDict(
            (f"{r.seq_id} {r.species}" if r.species and r.species != r.seq_id else r.seq_id, r.amplicon)
            for r in self.retained
        )

    def length_summary(self, bins=10) -> Optional[Dict]:
        """
        Summarize retained amplicon lengths.

        Returns:
            Dictionary with count, min, median, max and a histogram
            (counts, edges), or None without retained amplicons
        """
        if not self.retained:
            return None

        lengths = np.array([len(r.amplicon) for r in self.retained])
        bins = max(1, min(bins, len(np.unique(lengths))))
        hist_counts, edges = np.histogram(lengths, bins=bins)
        return {
            "count": int(lengths.size),
            "min": int(lengths.min()),
            "median": float(np.median(lengths)),
            "max": int(lengths.max()),
            "histogram": (hist_counts.tolist(), edges.tolist()),
        }

    def to_dataframe(self) -> pd.DataFrame:
        """Build the provenance table, one row per input sequence."""
        rows = []
        for result in self.results:
            window = result.window
            rows.append({
                "seq_id": result.seq_id,
                "species": result.species,
                "status": result.status.value,
                "terminal_state": result.terminal_state.value if result.terminal_state else None,
                "amplicon_length": len(result.amplicon) if result.amplicon else 0,
                "strand": window.strand if window else None,
                "window_start": window.start if window else None,
                "window_end": window.end if window else None,
                "reference_id": result.reference_id,
                "coverage": result.coverage,
                "identity": result.identity,
                "reverse_complemented": result.reverse_complemented,
                "reoriented": result.reoriented,
                "message": result.message,
            })
        return pd.DataFrame(rows, columns=PROVENANCE_COLUMNS)

    def log_summary(self):
        """Log run counts and the amplicon length distribution."""
        counts = self.counts()
        logger.info(f"\n=== Extraction summary for {self.pair.locus} ===")
        logger.info(f"Input sequences: {counts['total']}")
        for status in Provenance:
            if counts.get(status.value):
                logger.info(f"  {status.value}: {counts[status.value]}")
        logger.info(f"Retained amplicons: {counts.get(TerminalState.RETAINED.value, 0)}")
        if counts.get(TerminalState.DUPLICATE.value):
            logger.info(f"Dropped duplicates: {counts[TerminalState.DUPLICATE.value]}")

        summary = self.length_summary()
        if summary:
            logger.info(
                f"Amplicon length: min={summary['min']}, median={summary['median']:.1f}, max={summary['max']}"
            )
            if logger.isEnabledFor(logging.DEBUG):
                hist_counts, edges = summary["histogram"]
                for count, low, high in zip(hist_counts, edges[:-1], edges[1:]):
                    logger.debug(f"  {low:8.1f}-{high:8.1f}: {count}")


class AmpliconExtractor:
    """
    Runs the extraction workflow for one primer pair.

    Example:
        >>> extractor = AmpliconExtractor(pair, Config.get_extraction_settings())
        >>> report = extractor.run(references)
        >>> report.amplicons()
    """

    def __init__(self, pair, settings=None, cache=None):
        """
        Initialize the extractor.

        Args:
            pair: PrimerPair defining the target
            settings: ExtractionSettings snapshot, defaults to the current Config
            cache: Optional ResultCache
        """
        self.pair = pair
        self.settings = settings if settings is not None else Config.get_extraction_settings()
        self.cache = cache
        logger.debug(f"Initialized AmpliconExtractor for locus {pair.locus}")

    def _map_batches(self, worker, items, description, *args):
        """
        Apply a batch worker to items, in parallel when configured.

        Results are returned in input order. The first exception, in input
        order, is raised after pending batches are cancelled.
        """
        if not items:
            return []

        batches = CommonUtils.chunks(list(items), self.settings.batch_size)
        show_progress = self.settings.show_progress
        num_workers = min(self.settings.num_processes, len(batches))

        if num_workers <= 1:
            batch_iter = tqdm(batches, desc=description) if show_progress else batches
            return CommonUtils.flatten_list([worker(batch, *args) for batch in batch_iter])

        logger.debug(f"{description}: {len(items)} sequences in {len(batches)} batches on {num_workers} processes")

        batch_results = []
        with ProcessPoolExecutor(max_workers=num_workers) as executor:
            futures = [executor.submit(worker, batch, *args) for batch in batches]
            future_iter = tqdm(futures, total=len(futures), desc=description) if show_progress else futures
            try:
                for future in future_iter:
                    batch_results.append(future.result())
            except AmpExtractError:
                for pending in futures:
                    pending.cancel()
                raise
            except Exception as e:
                for pending in futures:
                    pending.cancel()
                error_msg = f"{description} failed in a worker process"
                logger.error(error_msg)
                logger.debug(f"Error details: {str(e)}", exc_info=True)
                raise WorkflowError(error_msg) from e

        return CommonUtils.flatten_list(batch_results)

    def build_pool(self, references, results) -> "OrderedDict[str, str]":
        """
        Collect the primer-free direct amplicons used as fallback targets.

        Amplicons are de-duplicated by sequence and ordered by seq_id.

        Args:
            references: Reference sequences, aligned with results
            results: Direct phase results

        Returns:
            OrderedDict mapping seq_id to amplicon
        """
        by_id = {reference.seq_id: reference for reference in references}
        pool = OrderedDict()
        seen = set()

        for result in sorted(results, key=lambda r: r.seq_id):
            if result.status is not Provenance.DIRECT:
                continue
            amplicon = AmpliconResolver.extract_window(
                by_id[result.seq_id].sequence, result.window, True, self.settings.orient_to_forward
            )
            if amplicon and amplicon not in seen:
                seen.add(amplicon)
                pool[result.seq_id] = amplicon

        logger.debug(f"Fallback pool holds {len(pool)} distinct amplicons")
        return pool

    def extract(self, references) -> List[ExtractionResult]:
        """
        Run direct search and fallback alignment without cleanup.

        Args:
            references: Reference sequences

        Returns:
            One ExtractionResult per reference, in input order

        Raises:
            AmbiguousAmplificationError: If halting is enabled and a sequence
                has more than one amplicon window
        """
        results = self._map_batches(
            _direct_batch, references, "Direct primer search", self.pair, self.settings
        )

        direct = sum(1 for r in results if r.status is Provenance.DIRECT)
        unmatched = [ref for ref, res in zip(references, results) if res.status is Provenance.NO_MATCH]
        logger.info(f"Direct primer search: {direct} matched, {len(unmatched)} without a complete window")

        ambiguous = [r.seq_id for r in results if r.status is Provenance.AMBIGUOUS]
        if ambiguous:
            logger.warning(f"{len(ambiguous)} sequences flagged as ambiguous and excluded: {', '.join(ambiguous[:5])}"
                           f"{'...' if len(ambiguous) > 5 else ''}")

        if not unmatched:
            return results

        if not self.settings.enable_fallback:
            for result in results:
                if result.status is Provenance.NO_MATCH:
                    result.status = Provenance.UNRECOVERED
                    result.message = f"{result.message}; fallback alignment disabled"
            return results

        pool = self.build_pool(references, results)
        recovered = self._map_batches(
            _fallback_batch, unmatched, "Fallback alignment", pool, self.settings
        )

        by_id = {result.seq_id: result for result in recovered}
        results = [by_id.get(result.seq_id, result) for result in results]

        count = sum(1 for r in recovered if r.status is Provenance.RECOVERED)
        logger.info(f"Fallback alignment: {count} of {len(unmatched)} sequences recovered")
        return results

    def run(self, references) -> ExtractionReport:
        """
        Run the full extraction workflow.

        Args:
            references: Reference sequences with unique seq_ids

        Returns:
            ExtractionReport

        Raises:
            WorkflowError: If sequence identifiers are not unique
            AmbiguousAmplificationError: If halting is enabled and a sequence
                has more than one amplicon window
        """
        references = list(references)
        duplicates = [seq_id for seq_id, n in Counter(r.seq_id for r in references).items() if n > 1]
        if duplicates:
            error_msg = f"Duplicate sequence identifiers: {', '.join(sorted(duplicates)[:5])}"
            logger.error(error_msg)
            raise WorkflowError(error_msg)

        logger.info(
            f"Extracting {self.pair.locus} amplicons from {len(references)} sequences "
            f"({self.pair.forward.primer_id}={self.pair.forward.sequence}, "
            f"{self.pair.reverse.primer_id}={self.pair.reverse.sequence})"
        )

        results = None
        key = None
        if self.cache is not None:
            key = self.cache.make_key(self.pair, references, self.settings)
            results = self.cache.get(key)

        from_cache = results is not None
        if from_cache:
            logger.info("Loaded extraction results from cache")
        else:
            results = self.extract(references)
            if self.cache is not None:
                self.cache.put(key, results)

        retained = CleanupProcessor.process(results, self.settings)
        return ExtractionReport(self.pair, self.settings, results, retained, from_cache)
