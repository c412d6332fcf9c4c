#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Common utility functions for ampExtract pipeline.

Contains functionality for:
1. Splitting work lists into batches for worker processes
2. Flattening per-batch results back into one list
"""

import logging

# Set up module logger
logger = logging.getLogger(__name__)


class CommonUtils:
    """
    General utility functions used across the pipeline.

    Example:
        >>> CommonUtils.chunks([1, 2, 3, 4, 5], 2)
        [[1, 2], [3, 4], [5]]
    """

    @staticmethod
    def chunks(lst, n):
        """
        Split a list into chunks of specified size.

        Args:
            lst: List to split into chunks
            n: Chunk size (must be positive integer)

        Returns:
            List of chunks from the original list, in order

        Raises:
            TypeError: If lst is not a list
            ValueError: If n is not a positive integer
        """
        if not isinstance(lst, list):
            error_msg = f"Input to chunks must be a list, got {type(lst).__name__}"
            logger.error(error_msg)
            raise TypeError(error_msg)

        if not isinstance(n, int) or n <= 0:
            error_msg = f"Chunk size must be a positive integer, got {n}"
            logger.error(error_msg)
            raise ValueError(error_msg)

        chunks_list = [lst[i:i + n] for i in range(0, len(lst), n)]
        logger.debug(f"Split {len(lst)} items into {len(chunks_list)} chunks of up to {n}")
        return chunks_list

    @staticmethod
    def flatten_list(list_of_lists):
        """
        Flatten a list of lists into a single list.

        Example:
            >>> CommonUtils.flatten_list([[1, 2], [3]])
            [1, 2, 3]
        """
        return [item for sublist in list_of_lists for item in sublist]
