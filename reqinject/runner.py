"""Plan execution: build the injection plan and run every entry.

Entries run in worker threads so archive I/O never blocks the event loop.
A semaphore bounds how many artifacts are patched at once (default 1, so
strictly sequential); entries that share a target path are additionally
serialized by a per-path lock.

Each entry's failure is captured in its own InjectionOutcome and does not
stop its siblings. Callers that want all-or-nothing semantics pass the
outcomes to raise_for_failures().

Cancellation: an entry that is already running is allowed to finish,
including its archive write, before the cancellation propagates. Entries
that have not started are never started.
"""

import asyncio
import logging
import os
from pathlib import Path
from typing import Optional, Union

from reqinject.core.config import Settings, get_settings
from reqinject.core.logging import bind_artifact
from reqinject.errors import InjectionError, InjectionFailedError
from reqinject.injection.orchestrator import inject_one_artifact
from reqinject.injection.types import InjectionOutcome
from reqinject.planner.planner import build_plan
from reqinject.planner.types import DeploymentConfig, PlanEntry

logger = logging.getLogger(__name__)


async def inject_all(
    config: DeploymentConfig,
    settings: Optional[Settings] = None,
    fallback_artifact: Optional[Union[str, Path]] = None,
    max_concurrency: Optional[int] = None,
) -> list[InjectionOutcome]:
    """Inject requirements into every artifact the configuration calls for.

    Returns one outcome per plan entry, in plan order. Layer mode returns
    an empty list without touching the filesystem.

    Raises:
        InvalidConfigurationError: If the configuration cannot be planned.
    """
    if config.layer:
        # Requirements will be shipped in a layer instead
        return []

    settings = settings or get_settings()
    plan = build_plan(config, settings, fallback_artifact)
    if not plan:
        logger.info("No artifacts need requirements injection")
        return []

    logger.info("Injecting required Python packages to package...")

    limit = settings.max_concurrency if max_concurrency is None else max_concurrency
    if limit < 1:
        raise ValueError("max_concurrency must be at least 1")
    semaphore = asyncio.Semaphore(limit)
    locks: dict[str, asyncio.Lock] = {}
    started: set[int] = set()

    async def run(index: int, entry: PlanEntry) -> InjectionOutcome:
        lock = locks.setdefault(os.path.abspath(entry.target_artifact), asyncio.Lock())
        async with semaphore, lock:
            started.add(index)
            return await _run_to_completion(entry, settings.compress_level)

    tasks = [asyncio.ensure_future(run(i, entry)) for i, entry in enumerate(plan)]
    try:
        await asyncio.wait(tasks)
    except asyncio.CancelledError:
        # Drop queued entries; running ones finish their archive write first
        for index, task in enumerate(tasks):
            if index not in started:
                task.cancel()
        await asyncio.wait(tasks)
        raise
    outcomes = [task.result() for task in tasks]

    failed = [o for o in outcomes if not o.is_success]
    logger.info(
        "Requirements injected into %d/%d artifact(s)",
        len(outcomes) - len(failed),
        len(outcomes),
    )
    return outcomes


def inject_all_sync(
    config: DeploymentConfig,
    settings: Optional[Settings] = None,
    fallback_artifact: Optional[Union[str, Path]] = None,
    max_concurrency: Optional[int] = None,
) -> list[InjectionOutcome]:
    """Blocking wrapper around inject_all() for callers without an event loop."""
    return asyncio.run(inject_all(
        config,
        settings=settings,
        fallback_artifact=fallback_artifact,
        max_concurrency=max_concurrency,
    ))


def raise_for_failures(outcomes: list[InjectionOutcome]) -> None:
    """Raise InjectionFailedError if any outcome carries an error."""
    failures = [
        (str(o.target_artifact), o.error)
        for o in outcomes
        if o.error is not None
    ]
    if failures:
        raise InjectionFailedError(failures)


async def _run_to_completion(entry: PlanEntry, compress_level: int) -> InjectionOutcome:
    task = asyncio.ensure_future(asyncio.to_thread(_run_entry, entry, compress_level))
    try:
        return await asyncio.shield(task)
    except asyncio.CancelledError:
        # Never leave a half-written archive behind
        await asyncio.wait({task})
        raise


def _run_entry(entry: PlanEntry, compress_level: int) -> InjectionOutcome:
    with bind_artifact(str(entry.target_artifact)):
        try:
            return inject_one_artifact(entry, compress_level)
        except InjectionError as exc:
            logger.error(
                "Requirements injection failed for %s (%s): %s",
                entry.target_artifact,
                entry.label,
                exc,
            )
            return InjectionOutcome(
                target_artifact=entry.target_artifact,
                function_name=entry.function_name,
                error=exc,
            )
