#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Result cache module for ampExtract pipeline.

Stores the per-sequence results of an extraction run as JSON, keyed by a
SHA-256 digest over the canonical JSON form of everything that determines
them: the primer pair, the reference sequences and the result-relevant
settings. Any change to one of these yields a different key, so entries
never need invalidation.
"""

import os
import json
import hashlib
import logging
from typing import List, Optional

from ..config import CacheError
from ..core.records import ExtractionResult

# Set up module logger
logger = logging.getLogger(__name__)

CACHE_FORMAT_VERSION = 1


class ResultCache:
    """
    Content-addressed store for extraction results.

    Example:
        >>> cache = ResultCache("~/.ampextract/cache")
        >>> key = cache.make_key(pair, references, settings)
        >>> results = cache.get(key)
    """

    def __init__(self, cache_dir):
        """
        Initialize the cache, creating its directory if necessary.

        Args:
            cache_dir: Directory holding cache entries

        Raises:
            CacheError: If the directory cannot be created
        """
        self.cache_dir = os.path.expanduser(cache_dir)
        try:
            os.makedirs(self.cache_dir, exist_ok=True)
        except OSError as e:
            error_msg = f"Failed to create cache directory {self.cache_dir}"
            logger.error(error_msg)
            logger.debug(f"Error details: {str(e)}", exc_info=True)
            raise CacheError(error_msg) from e

    @staticmethod
    def make_key(pair, references, settings) -> str:
        """
        Compute the cache key of an extraction run.

        Args:
            pair: PrimerPair
            references: Sequence of ReferenceSequence
            settings: ExtractionSettings snapshot

        Returns:
            Hex SHA-256 digest
        """
        payload = {
            "version": CACHE_FORMAT_VERSION,
            "pair": pair.to_dict(),
            "references": [[r.seq_id, r.sequence, r.species] for r in references],
            "parameters": settings.result_parameters(),
        }
        canonical = json.dumps(payload, sort_keys=True, separators=(",", ":"))
        return hashlib.sha256(canonical.encode("utf-8")).hexdigest()

    def path_for(self, key):
        return os.path.join(self.cache_dir, f"{key}.json")

    def get(self, key) -> Optional[List[ExtractionResult]]:
        """
        Look up cached results.

        Unreadable entries are reported and treated as a miss.

        Args:
            key: Key from make_key

        Returns:
            List of ExtractionResult, or None on a miss
        """
        path = self.path_for(key)
        if not os.path.exists(path):
            logger.debug(f"Cache miss for {key[:12]}")
            return None

        try:
            with open(path, 'r') as f:
                data = json.load(f)
            results = [ExtractionResult.from_dict(item) for item in data["results"]]
        except (OSError, ValueError, KeyError, TypeError) as e:
            logger.warning(f"Ignoring unreadable cache entry {path}: {str(e)}")
            return None

        logger.debug(f"Cache hit for {key[:12]}: {len(results)} results")
        return results

    def put(self, key, results):
        """
        Store results under a key.

        Args:
            key: Key from make_key
            results: List of ExtractionResult

        Raises:
            CacheError: If the entry cannot be written
        """
        path = self.path_for(key)
        tmp_path = f"{path}.tmp"
        data = {
            "version": CACHE_FORMAT_VERSION,
            "results": [result.to_dict() for result in results],
        }

        try:
            with open(tmp_path, 'w') as f:
                json.dump(data, f)
            os.replace(tmp_path, path)
        except (OSError, TypeError) as e:
            error_msg = f"Failed to write cache entry {path}"
            logger.error(error_msg)
            logger.debug(f"Error details: {str(e)}", exc_info=True)
            raise CacheError(error_msg) from e

        logger.debug(f"Cached {len(results)} results under {key[:12]}")
