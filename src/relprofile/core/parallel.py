"""
Split-merge execution of a collection request over shards of features.

Each shard is an isolated unit of work: it owns a contiguous block of the
feature list, opens its own handle on every dataset source and returns its
partial matrices in memory. The coordinator waits for every shard before
merging, and any failed or missing shard fails the whole run.
"""

from concurrent.futures import ALL_COMPLETED, Executor, ProcessPoolExecutor, ThreadPoolExecutor, wait
from typing import Dict, List, Optional, Sequence

import structlog
from pydantic import BaseModel, Field

from ..config.settings import CollectionConfig
from ..exceptions import WorkerFailureError
from ..models.features import Feature, WindowSpec
from ..models.matrix import ValueMatrix
from ..models.result import CollectionStats
from .collection import CollectionStrategy, DatasetCollector
from .sources import DatasetSpec


def effective_workers(n_rows: int, workers: int, min_rows: int = 100) -> int:
    """Reduce the worker count until each shard gets at least ``min_rows`` features."""
    while workers > 1 and n_rows / workers < min_rows:
        workers -= 1
    return max(workers, 1)


def partition(n_rows: int, n_shards: int) -> List[List[int]]:
    """
    Split row indices into ``n_shards`` contiguous blocks.

    Blocks hold ``n_rows // n_shards`` rows each and the last block also takes
    the remainder, so concatenating the blocks restores the input order.
    """
    if n_shards < 1:
        raise ValueError("Number of shards must be positive")
    part_length = n_rows // n_shards
    shards = []
    for k in range(n_shards):
        stop = n_rows if k == n_shards - 1 else (k + 1) * part_length
        shards.append(list(range(k * part_length, stop)))
    return shards


class ShardTask(BaseModel):
    """Everything one worker needs, with no reference to shared state."""

    shard_id: int
    row_ids: List[int]
    features: List[Feature]
    datasets: List[DatasetSpec]
    plans: Dict[str, List[WindowSpec]]
    strategies: Dict[str, CollectionStrategy]
    config: CollectionConfig


class ShardResult(BaseModel):
    """Partial matrices of one shard, tagged with their original rows."""

    shard_id: int
    row_ids: List[int]
    matrices: Dict[str, ValueMatrix]
    stats: Dict[str, CollectionStats] = Field(default_factory=dict)

    model_config = {"arbitrary_types_allowed": True}


def run_shard(task: ShardTask) -> ShardResult:
    """
    Collect every dataset for one shard of features.

    Top-level so process pools can pickle it. Sources are opened here, inside
    the worker, since source handles are not safe to share across workers.
    """
    logger = structlog.get_logger("relprofile")
    matrices = {}
    stats = {}
    for dataset in task.datasets:
        with dataset.open() as source:
            collector = DatasetCollector(
                task.plans[dataset.name],
                source,
                task.config,
                task.strategies[dataset.name],
                logger=logger,
            )
            matrices[dataset.name] = collector.collect(task.features, task.row_ids)
            stats[dataset.name] = collector.stats
    logger.debug("Shard collected", shard_id=task.shard_id, features=len(task.features))
    return ShardResult(
        shard_id=task.shard_id,
        row_ids=task.row_ids,
        matrices=matrices,
        stats=stats,
    )


class ShardCoordinator:
    """Runs shard tasks on a worker pool and waits for all of them."""

    def __init__(self, backend: str = "process", logger: Optional[structlog.BoundLogger] = None):
        self.backend = backend
        self.logger = logger or structlog.get_logger("relprofile")

    def _executor(self, workers: int) -> Executor:
        if self.backend == "thread":
            return ThreadPoolExecutor(max_workers=workers)
        return ProcessPoolExecutor(max_workers=workers)

    def run(self, tasks: Sequence[ShardTask]) -> List[ShardResult]:
        """
        Execute every task and return the results ordered by shard.

        Raises:
            WorkerFailureError: if any shard raised, or fewer results came
                back than shards were dispatched
        """
        self.logger.info("Dispatching shards", shards=len(tasks), backend=self.backend)
        with self._executor(len(tasks)) as executor:
            futures = {executor.submit(run_shard, task): task.shard_id for task in tasks}
            wait(futures, return_when=ALL_COMPLETED)

        results = []
        failed = []
        first_error = None
        for future, shard_id in futures.items():
            error = future.exception()
            if error is not None:
                self.logger.error(
                    "Shard failed",
                    shard_id=shard_id,
                    error_type=type(error).__name__,
                    error_message=str(error),
                )
                failed.append(shard_id)
                first_error = first_error or error
                continue
            results.append(future.result())

        if failed:
            raise WorkerFailureError(f"Shard collection failed: {first_error}", failed) from first_error
        if len(results) != len(tasks):
            returned = {r.shard_id for r in results}
            missing = [t.shard_id for t in tasks if t.shard_id not in returned]
            raise WorkerFailureError(
                f"only found {len(results)} shard results when there should be {len(tasks)}",
                missing,
            )
        self.logger.info("All shards completed", shards=len(results))
        return sorted(results, key=lambda r: r.shard_id)


def merge_shards(results: Sequence[ShardResult], dataset: str, n_rows: int) -> ValueMatrix:
    """Reassemble one dataset's partial matrices in original row order."""
    missing = [r.shard_id for r in results if dataset not in r.matrices]
    if missing:
        raise WorkerFailureError(f"Dataset '{dataset}' missing from shard results", missing)
    return ValueMatrix.merge([r.matrices[dataset] for r in results], n_rows)


def merge_stats(results: Sequence[ShardResult], dataset: str) -> CollectionStats:
    total = CollectionStats()
    for result in results:
        total = total.merge(result.stats.get(dataset, CollectionStats()))
    return total
