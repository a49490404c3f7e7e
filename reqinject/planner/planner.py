"""Fan-out planner: decides which artifacts get which dependencies.

Decision order, evaluated once per deployment:
1. Layer mode: dependencies ship as a separate layer, so the plan is empty.
2. Individually packaged: one entry per function with a Python runtime.
   Each function's staging dir is <staging root>/<module>; its source is the
   requirements/ subdirectory, or .requirements.zip in zip mode.
3. Shared artifact: one entry for the service archive, sourced from the
   shared staging dir (requirements/ or .requirements.zip in zip mode).

All filtering happens here, before any archive is opened.
"""

import logging
import re
from pathlib import Path
from typing import Optional, Union

from reqinject.core.config import Settings, get_settings
from reqinject.errors import InvalidConfigurationError
from reqinject.planner.types import DeploymentConfig, FunctionUnit, PlanEntry
from reqinject.staging.types import (
    BUNDLE_ENTRY_NAME,
    REQUIREMENTS_DIR_NAME,
    DirectoryTree,
    PrebuiltBundle,
    StagingSource,
)

logger = logging.getLogger(__name__)

_PYTHON_RUNTIME_RE = re.compile(r"^python")

# Module path used when a function does not declare one
DEFAULT_MODULE = "."


def is_python_runtime(runtime: Optional[str]) -> bool:
    """True for runtime identifiers of the Python family (case-sensitive).

    An unset runtime is not Python.
    """
    return runtime is not None and _PYTHON_RUNTIME_RE.match(runtime) is not None


def build_plan(
    config: DeploymentConfig,
    settings: Optional[Settings] = None,
    fallback_artifact: Optional[Union[str, Path]] = None,
) -> tuple[PlanEntry, ...]:
    """Build the ordered injection plan for a deployment.

    fallback_artifact is used for the shared archive when the configuration
    does not name one (the host framework's default package path).

    Raises:
        InvalidConfigurationError: If an artifact that needs patching has no path.
    """
    if config.layer:
        logger.debug("Layer mode active; requirements are not injected into archives")
        return ()

    settings = settings or get_settings()
    staging_root = Path(config.service_path) / settings.staging_dir_name

    if config.individually:
        plan = tuple(
            _function_entry(config, func, staging_root)
            for func in config.functions
            if is_python_runtime(func.runtime or config.default_runtime)
        )
        skipped = len(config.functions) - len(plan)
        if skipped:
            logger.debug("Skipped %d function(s) with non-Python runtimes", skipped)
        return plan

    artifact = config.artifact or (str(fallback_artifact) if fallback_artifact else None)
    if not artifact:
        raise InvalidConfigurationError(
            "No service artifact path configured and no fallback artifact given"
        )
    return (
        PlanEntry(
            source=_staging_source(staging_root, config.zip),
            target_artifact=_resolve(config.service_path, artifact),
            exclusions=config.exclusions,
        ),
    )


def _function_entry(
    config: DeploymentConfig,
    func: FunctionUnit,
    staging_root: Path,
) -> PlanEntry:
    if not func.artifact:
        raise InvalidConfigurationError(
            f"Function '{func.name}' is packaged individually but has no artifact path"
        )
    module = func.module or DEFAULT_MODULE
    return PlanEntry(
        source=_staging_source(staging_root / module, config.zip),
        target_artifact=_resolve(config.service_path, func.artifact),
        exclusions=config.exclusions,
        function_name=func.name,
    )


def _staging_source(staging_dir: Path, zipped: bool) -> StagingSource:
    if zipped:
        return PrebuiltBundle(staging_dir / BUNDLE_ENTRY_NAME)
    return DirectoryTree(staging_dir / REQUIREMENTS_DIR_NAME)


def _resolve(service_path: Path, artifact: str) -> Path:
    path = Path(artifact)
    if path.is_absolute():
        return path
    return Path(service_path) / path
