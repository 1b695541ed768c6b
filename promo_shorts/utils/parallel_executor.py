"""Parallel Executor - controlled parallelism for independent API calls within a job."""

import time
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from typing import Any, Callable, Optional

from promo_shorts.core.config import Settings


class ParallelExecutor:
    """Runs independent calls of one job concurrently with bounded workers."""

    def __init__(self, settings: Settings, logger: Any):
        """
        Initialize parallel executor.

        Args:
            settings: Application settings
            logger: Logger instance
        """
        self.settings = settings
        self.logger = logger
        self.max_parallel_api_calls = getattr(settings, "max_parallel_api_calls", 4)

    def execute_api_calls(
        self,
        tasks: list[Callable[[], Any]],
        task_names: Optional[list[str]] = None,
        max_workers: Optional[int] = None,
    ) -> list[tuple[Any, Optional[Exception]]]:
        """
        Execute a batch of API calls in parallel and wait for all of them.

        Returning only after every task finished makes this call a barrier:
        callers can rely on all results being final.

        Args:
            tasks: List of callable tasks to execute
            task_names: Optional list of task names for logging
            max_workers: Maximum number of parallel workers (defaults to max_parallel_api_calls)

        Returns:
            List of (result, exception) tuples in the same order as tasks
        """
        if not tasks:
            return []

        max_workers = max_workers or self.max_parallel_api_calls
        names = [
            task_names[i] if task_names and i < len(task_names) else f"api_call_{i+1}"
            for i in range(len(tasks))
        ]

        # Sequential mode
        if max_workers == 1:
            results: list[tuple[Any, Optional[Exception]]] = []
            for name, task in zip(names, tasks):
                try:
                    results.append((task(), None))
                except Exception as e:
                    self.logger.error(f"❌ {name} failed: {e}")
                    results.append((None, e))
            return results

        self.logger.debug(f"Parallel API calls: {len(tasks)} tasks with max {max_workers} workers")
        start_time = time.time()
        ordered: list[tuple[Any, Optional[Exception]]] = [(None, None)] * len(tasks)
        completed_count = 0

        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            future_to_index = {executor.submit(task): i for i, task in enumerate(tasks)}

            for future in as_completed(future_to_index):
                index = future_to_index[future]
                completed_count += 1
                elapsed = time.time() - start_time
                try:
                    ordered[index] = (future.result(), None)
                    self.logger.debug(
                        f"✅ {names[index]} completed ({completed_count}/{len(tasks)}) in {elapsed:.2f}s"
                    )
                except Exception as e:
                    self.logger.warning(
                        f"❌ {names[index]} failed ({completed_count}/{len(tasks)}) after {elapsed:.2f}s: {e}"
                    )
                    ordered[index] = (None, e)

        successful = sum(1 for _, error in ordered if error is None)
        self.logger.debug(
            f"API batch complete: {successful}/{len(tasks)} successful in {time.time() - start_time:.2f}s"
        )
        return ordered

    def run_in_background(self, task: Callable[[], Any], task_name: str = "background_task") -> Future:
        """
        Start one call on its own worker thread and return its future.

        Args:
            task: Callable to run
            task_name: Name for logging

        Returns:
            Future resolving to the task's result
        """
        executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix=task_name)
        try:
            self.logger.debug(f"Started {task_name} in background")
            return executor.submit(task)
        finally:
            # The worker keeps running the submitted task; no new work is accepted.
            executor.shutdown(wait=False)
