"""Parallel execution utilities for block-wise array sweeps."""

import os
from concurrent.futures import ThreadPoolExecutor, as_completed


def resolve_workers(n_jobs):
    """Translate an n_jobs setting into a worker count."""
    if n_jobs == -1:
        return os.cpu_count() or 1
    if n_jobs < 1:
        raise ValueError(f"n_jobs must be -1 or a positive integer, got {n_jobs}")
    return n_jobs


def parallel_map(func, args_list, n_jobs=1):
    """Execute func(*args) for each args in args_list, optionally in parallel.

    Uses threads rather than processes because the per-block work is done by
    NumPy ufuncs that release the GIL, and the blocks write into disjoint
    slices of a single output array that subprocesses could not share.

    Parameters
    ----------
    func : callable
        Function to call for each set of arguments.
    args_list : list of tuples
        Arguments for each call.
    n_jobs : int
        1 = sequential (default), -1 = all cores, >1 = that many workers.

    Returns
    -------
    list
        Results in the same order as args_list.
    """
    max_workers = resolve_workers(n_jobs)
    if max_workers == 1:
        return [func(*args) for args in args_list]

    results = [None] * len(args_list)

    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        future_to_idx = {
            executor.submit(func, *args): i
            for i, args in enumerate(args_list)
        }
        for future in as_completed(future_to_idx):
            idx = future_to_idx[future]
            results[idx] = future.result()
    return results
