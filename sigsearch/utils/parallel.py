from __future__ import annotations

from concurrent.futures import Executor, ProcessPoolExecutor, ThreadPoolExecutor, as_completed
from typing import Any, Callable, Dict, Iterable, List, Optional

from tqdm import tqdm

from sigsearch.logging_utils import get_logger
from sigsearch.utils.errors import ConfigurationError, SignatureSearchError, WorkerError

logger = get_logger(__name__)

POOL_KINDS = ("thread", "process")


def _raise_first_failure(failures: Dict[int, BaseException]) -> None:
    """Raise the failure of the lowest task index so reporting ignores scheduling."""
    idx = min(failures)
    exc = failures[idx]
    if isinstance(exc, SignatureSearchError):
        raise exc
    raise WorkerError(f"task {idx} raised {exc!r}", block_index=idx) from exc


def parallel_map(
    func: Callable[[Any], Any],
    items: Iterable[Any],
    max_workers: int = 4,
    desc: Optional[str] = None,
    executor_factory: Callable[..., Executor] = ThreadPoolExecutor,
) -> List[Any]:
    """Apply func to every item and return results in item order.

    Every task runs to completion before failures are reported. A failing
    task aborts the whole map: search errors propagate unchanged, anything
    else is wrapped in WorkerError carrying the task index.
    """
    items_list = list(items)
    results: List[Any] = [None] * len(items_list)
    failures: Dict[int, BaseException] = {}
    with executor_factory(max_workers=max_workers) as executor:
        future_map = {executor.submit(func, item): idx for idx, item in enumerate(items_list)}
        iterator = as_completed(future_map)
        if desc:
            iterator = tqdm(iterator, total=len(items_list), desc=desc)
        for fut in iterator:
            idx = future_map[fut]
            try:
                results[idx] = fut.result()
            except Exception as exc:
                logger.warning("[PARALLEL] Task %d failed: %r", idx, exc)
                failures[idx] = exc
    if failures:
        _raise_first_failure(failures)
    return results


def sequential_map(
    func: Callable[[Any], Any],
    items: Iterable[Any],
    desc: Optional[str] = None,
) -> List[Any]:
    """In-process counterpart of parallel_map with the same failure semantics."""
    items_list = list(items)
    results: List[Any] = []
    iterator = tqdm(items_list, desc=desc) if desc else items_list
    for idx, item in enumerate(iterator):
        try:
            results.append(func(item))
        except Exception as exc:
            logger.warning("[PARALLEL] Task %d failed: %r", idx, exc)
            _raise_first_failure({idx: exc})
    return results


class WorkerPool:
    """Bounded pool of workers handed to the search orchestrator.

    ``workers=1`` runs every task in the calling thread. ``kind`` selects
    threads or processes for ``workers > 1``; with processes, the mapped
    function and its items must be picklable.
    """

    def __init__(self, workers: int = 1, kind: str = "thread", show_progress: bool = False):
        if not isinstance(workers, int) or isinstance(workers, bool) or workers < 1:
            raise ConfigurationError(f"workers must be a positive integer, got {workers!r}")
        if kind not in POOL_KINDS:
            raise ConfigurationError(f"pool kind must be one of {POOL_KINDS}, got {kind!r}")
        self.workers = workers
        self.kind = kind
        self.show_progress = show_progress

    def __repr__(self) -> str:
        return f"WorkerPool(workers={self.workers}, kind={self.kind!r})"

    @property
    def executor_factory(self) -> Callable[..., Executor]:
        return ProcessPoolExecutor if self.kind == "process" else ThreadPoolExecutor

    def map(self, func: Callable[[Any], Any], items: Iterable[Any], desc: Optional[str] = None) -> List[Any]:
        desc = desc if self.show_progress else None
        if self.workers == 1:
            return sequential_map(func, items, desc=desc)
        return parallel_map(
            func,
            items,
            max_workers=self.workers,
            desc=desc,
            executor_factory=self.executor_factory,
        )


__all__ = ["parallel_map", "sequential_map", "WorkerPool", "POOL_KINDS"]
