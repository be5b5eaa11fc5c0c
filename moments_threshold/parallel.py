"""
Chunked thread-pool helper shared by the histogram builder and the classifier.
"""

from concurrent.futures import ThreadPoolExecutor
from typing import Callable, List, Sequence

import numpy as np


def map_chunks(fn: Callable, arrays: Sequence[np.ndarray], workers: int = 0) -> List:
    """
    Split aligned 1-D arrays into contiguous chunks and apply ``fn`` to each.

    Results come back in chunk order, so merging them (sum, concatenate) is
    deterministic regardless of which thread finished first. With
    ``workers <= 1`` the whole arrays are handed to ``fn`` in one call.
    """
    size = arrays[0].size
    if not workers or workers <= 1 or size < 2:
        return [fn(*arrays)]

    n_chunks = min(int(workers), size)
    chunks = list(zip(*(np.array_split(a, n_chunks) for a in arrays)))
    with ThreadPoolExecutor(max_workers=int(workers)) as ex:
        return list(ex.map(lambda c: fn(*c), chunks))
