#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
ampExtract Pipeline

In-silico PCR amplicon extraction for metabarcoding reference databases.

Workflow:
1. Load reference sequences (FASTA) and the primer pair (primer table or
   command line sequences)
2. Direct primer search with IUPAC ambiguity codes on both strands
3. Fallback alignment of partial sequences against the direct amplicons
4. Orientation check, de-duplication and ordering
5. Amplicon FASTA and provenance table output
"""

import sys
import argparse
import logging
import traceback

# Import package modules
from .config import (Config, setup_logging, display_config, generate_config_template,
                     AmpExtractError, AmbiguousAmplificationError, ConfigError, FileError)
from .core import AmpliconExtractor, PrimerPair
from .utils import ToolChecker
from .utils.cache import ResultCache
from .utils.file_io import FileIO

# Set up module logger
logger = logging.getLogger(__name__)


def parse_arguments(argv=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description='ampExtract: in-silico PCR amplicon extraction for reference databases',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        usage='ampextract --fasta [.fasta] (--primers [.csv, .tsv, .xlsx] [--locus NAME] | --forward SEQ --reverse SEQ)\n'
              '        [--output <dir>] [--prefix NAME] [--config [.json | template]] [--debug [MODULE...]]\n'
              '        [--no-fallback] [--untrimmed] [--flag-ambiguous] [--threads N] [--cache] [--check-tools]'
    )

    # Input files
    parser.add_argument('--fasta', metavar='[.fasta]', help='Reference sequence FASTA')
    parser.add_argument('--primers', metavar='[.csv, .tsv, .xlsx]', help='Primer table')
    parser.add_argument('--locus', metavar='NAME', help='Locus to select from the primer table')
    parser.add_argument('--forward', metavar='SEQ', help='Forward primer sequence (instead of --primers)')
    parser.add_argument('--reverse', metavar='SEQ', help='Reverse primer sequence (instead of --primers)')

    # Output
    parser.add_argument('--output', metavar='<dir>', help='Output directory')
    parser.add_argument('--prefix', metavar='NAME', help='Output file prefix (defaults to the locus)')

    # Options
    parser.add_argument('--config', metavar='[.json]', nargs='?', const='DISPLAY',
                        help='Configuration file, or display mode without a value, or "template"')
    parser.add_argument('--debug', nargs='*', metavar='MODULE',
                        help='Enable debug mode (universal or specific modules)')
    parser.add_argument('--no-fallback', action='store_true', help='Skip fallback alignment')
    parser.add_argument('--untrimmed', action='store_true', help='Keep primer binding sites in amplicons')
    parser.add_argument('--flag-ambiguous', action='store_true',
                        help='Flag ambiguous sequences instead of stopping the run')
    parser.add_argument('--threads', type=int, metavar='N', help='Number of worker processes')
    parser.add_argument('--cache', action='store_true', help='Reuse cached results of identical runs')
    parser.add_argument('--check-tools', action='store_true',
                        help='Verify that downstream tools (vsearch, mafft, ...) are installed')

    args = parser.parse_args(argv)

    # Process debug argument
    if args.debug is not None:
        args.debug = True if len(args.debug) == 0 else args.debug
    else:
        args.debug = False

    configuring = args.config in ('DISPLAY', 'template')
    if not configuring and not args.check_tools and not args.fasta:
        parser.error("--fasta is required")

    if args.fasta:
        if args.primers and (args.forward or args.reverse):
            parser.error("use either --primers or --forward/--reverse")
        if not args.primers and not (args.forward and args.reverse):
            parser.error("--primers or both --forward and --reverse are required")

    if args.threads is not None and args.threads < 1:
        parser.error("--threads must be at least 1")

    return args


def setup_pipeline(args):
    """
    Set up logging and configuration.

    Returns:
        bool: False if the run should stop after this step
    """
    setup_logging(debug=args.debug)

    logger.debug("Initializing ampExtract pipeline")
    Config.get_instance()

    # Handle configuration display/template
    if args.config in ('DISPLAY', 'template'):
        if args.config == 'template':
            generate_config_template(Config, output_dir=args.output)
        else:
            display_config(Config)
        return False

    # Load custom configuration
    if args.config:
        Config.load_from_file(args.config)
        logger.debug(f"Loaded configuration from {args.config}")

    # Apply command line overrides
    if args.debug:
        Config.DEBUG_MODE = True
    if args.no_fallback:
        Config.ENABLE_FALLBACK = False
        logger.info("Fallback alignment disabled")
    if args.untrimmed:
        Config.TRIM_PRIMERS = False
    if args.flag_ambiguous:
        Config.HALT_ON_AMBIGUOUS = False
    if args.threads is not None:
        Config.NUM_PROCESSES = args.threads
    if args.cache:
        Config.USE_CACHE = True

    if args.check_tools:
        found = ToolChecker.require(Config.REQUIRED_TOOLS)
        for tool, path in found.items():
            logger.info(f"{tool}: {path}")
        if not args.fasta:
            return False

    return True


def load_inputs(args):
    """
    Load the primer pair and reference sequences.

    Returns:
        Tuple (PrimerPair, list of ReferenceSequence)
    """
    if args.primers:
        table = FileIO.load_primer_table(args.primers)
        pair = FileIO.select_primer_pair(table, args.locus)
    else:
        pair = PrimerPair.from_sequences(args.forward, args.reverse, locus=args.locus or "amplicon")

    references = FileIO.load_fasta(args.fasta, Config.SPECIES_LABEL_PATTERN)
    logger.info(f"Loaded {len(references)} reference sequences from {args.fasta}")
    return pair, references


def save_outputs(report, args):
    """
    Write the amplicon FASTA and the provenance table.

    Returns:
        Dictionary with the written paths
    """
    prefix = args.prefix or report.pair.locus
    paths = FileIO.output_paths(prefix, args.output)

    FileIO.save_fasta(report.fasta_records(), paths["fasta"])
    FileIO.save_provenance(report.to_dataframe(), paths["provenance"])

    logger.info(f"Amplicons saved to: {paths['fasta']}")
    logger.info(f"Provenance table saved to: {paths['provenance']}")
    return paths


def run_pipeline(argv=None):
    """
    Main pipeline entry point.

    Args:
        argv: Command line arguments, defaults to sys.argv

    Returns:
        bool: True on success
    """
    try:
        args = parse_arguments(argv)

        if not setup_pipeline(args):
            return True

        logger.info("=== ampExtract Pipeline ===")

        pair, references = load_inputs(args)

        settings = Config.get_extraction_settings()
        cache = ResultCache(Config.CACHE_DIR) if Config.USE_CACHE else None

        report = AmpliconExtractor(pair, settings, cache).run(references)
        report.log_summary()

        if not report.retained:
            logger.warning("No amplicons retained")

        save_outputs(report, args)
        logger.info("=== Pipeline completed successfully! ===")
        return True

    except AmbiguousAmplificationError as e:
        logger.error(f"Pipeline stopped: {e}")
        logger.info("Use --flag-ambiguous to report such sequences and continue")
        return False
    except (ConfigError, FileError) as e:
        logger.error(f"Input error: {e}")
        return False
    except AmpExtractError as e:
        logger.error(f"Pipeline error: {e}")
        logger.debug(f"Error details: {str(e)}", exc_info=True)
        return False
    except Exception as e:
        logger.error(f"Unexpected error: {e}")
        logger.debug(traceback.format_exc())
        return False


def main():
    """Entry point for direct execution."""
    success = run_pipeline()
    sys.exit(0 if success else 1)


if __name__ == "__main__":
    main()
