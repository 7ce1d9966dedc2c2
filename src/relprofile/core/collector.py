"""
Main entry point collecting windowed data around a reference point of features.
"""

from typing import Dict, List, Sequence

import structlog

from ..config.settings import CollectionConfig
from ..exceptions import ConfigurationError, WorkerFailureError
from ..models.features import Feature, PositionMode, WindowSpec
from ..models.result import DatasetResult, RelativeDataResult
from ..utils import OperationLogger, log_error
from .collection import CollectionStrategy, select_strategy
from .parallel import (
    ShardCoordinator,
    ShardResult,
    ShardTask,
    effective_workers,
    merge_shards,
    merge_stats,
    partition,
    run_shard,
)
from .reference import has_summits
from .sources import DatasetSpec
from .windows import plan_from_config, window_span


class RelativeDataCollector:
    """Collects a value matrix per dataset for a list of features."""
    
    def __init__(self, config: CollectionConfig, logger: structlog.BoundLogger = None):
        """
        Initialize the collector.
        
        Args:
            config: Collection configuration
            logger: Structured logger instance
        """
        self.config = config
        self.logger = logger or structlog.get_logger("relprofile")
    
    def collect(self, features: Sequence[Feature], datasets: Sequence[DatasetSpec]) -> RelativeDataResult:
        """
        Collect windowed scores for every feature from every dataset.
        
        Args:
            features: Features in the order their rows should appear
            datasets: Datasets to collect, each with its own source factory
            
        Returns:
            RelativeDataResult with one matrix per dataset
            
        Raises:
            ConfigurationError: invalid request, before any feature is processed
            WorkerFailureError: a shard failed, with or without worker processes
        """
        features = list(features)
        with OperationLogger(self.logger, "relative_data_collection") as oplog:
            oplog.add_context(features=len(features), datasets=[d.name for d in datasets])
            
            config = self.validate(features, datasets)
            plans = self.prepare_plans(datasets, config)
            strategies = {
                name: select_strategy(windows, config.hash_limit, config.long_data)
                for name, windows in plans.items()
            }
            for name, windows in plans.items():
                self._log_plan(name, windows, strategies[name], config)
            
            workers = effective_workers(len(features), config.workers, config.min_rows_per_worker)
            if workers < config.workers:
                oplog.log_progress(
                    f"Reducing number of workers to {workers} due to number of input features",
                    requested_workers=config.workers,
                    workers=workers,
                )
            
            tasks = [
                ShardTask(
                    shard_id=shard_id,
                    row_ids=row_ids,
                    features=[features[i] for i in row_ids],
                    datasets=list(datasets),
                    plans=plans,
                    strategies=strategies,
                    config=config,
                )
                for shard_id, row_ids in enumerate(partition(len(features), workers))
            ]
            
            try:
                if workers > 1:
                    results = ShardCoordinator(config.parallel_backend, self.logger).run(tasks)
                else:
                    results = [self._run_single(tasks[0])]
            except Exception as e:
                log_error(self.logger, e, context={"operation": "collection", "workers": workers})
                raise
            
            result = RelativeDataResult(
                feature_names=[f.name for f in features],
                workers=workers,
                datasets=[
                    DatasetResult(
                        dataset=dataset.name,
                        strategy=strategies[dataset.name].value,
                        windows=plans[dataset.name],
                        matrix=merge_shards(results, dataset.name, len(features)),
                        stats=merge_stats(results, dataset.name),
                    )
                    for dataset in datasets
                ],
            )
            
            stats = result.stats
            oplog.log_progress(
                "Collected relative data",
                null_cells=stats.null_cells,
                empty_features=stats.empty_features,
                avoided_windows=stats.avoided_windows,
                interpolated_cells=stats.interpolated_cells,
            )
            return result
    
    def validate(self, features: Sequence[Feature], datasets: Sequence[DatasetSpec]) -> CollectionConfig:
        """
        Check the request and return the configuration to run with.
        
        Peak summits requested for features lacking them is an error, unless
        ``summit_fallback`` is set, in which case the midpoint is used instead.
        """
        if not datasets:
            raise ConfigurationError("No datasets provided to collect from")
        names = [d.name for d in datasets]
        if len(set(names)) != len(names):
            raise ConfigurationError("Dataset names must be unique")
        
        config = self.config
        if config.position is PositionMode.PEAK_SUMMIT and not has_summits(features):
            if not config.summit_fallback:
                raise ConfigurationError(
                    "Peak summit indicated as reference point, but not every feature has a summit"
                )
            self.logger.warning(
                "Peak summit indicated as reference point, but features lack summits; "
                "using interval midpoint instead"
            )
            config = config.model_copy(update={"position": PositionMode.MIDPOINT})
        return config
    
    def _run_single(self, task: ShardTask) -> ShardResult:
        """Run the only shard in this process, failing the same way a worker would."""
        try:
            return run_shard(task)
        except Exception as e:
            raise WorkerFailureError(f"Shard collection failed: {e}", [task.shard_id]) from e
    
    def prepare_plans(self, datasets: Sequence[DatasetSpec], config: CollectionConfig) -> Dict[str, List[WindowSpec]]:
        """Build the window plan of every dataset."""
        return {
            dataset.name: plan_from_config(config, dataset.name, dataset.enumerable)
            for dataset in datasets
        }
    
    def _log_plan(self, dataset: str, windows: List[WindowSpec], strategy: CollectionStrategy, config: CollectionConfig):
        self.logger.info(
            f"Collecting {'long' if strategy is CollectionStrategy.PER_WINDOW else 'hashed'} "
            f"{config.method.value} data between {config.starting_point}..{config.ending_point} "
            f"from the {config.position.description} in {config.window_size} bp windows from {dataset}",
            dataset=dataset,
            strategy=strategy.value,
            windows=len(windows),
            span=window_span(windows),
        )
