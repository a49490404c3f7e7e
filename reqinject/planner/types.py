"""Types for the fan-out planner.

DeploymentConfig is the immutable slice of the host framework's
configuration that injection depends on. It is built once per run (directly
or via loader.load_deployment_config) and handed to the planner; nothing
downstream of the planner sees it.

PlanEntry is the narrow slice each injection run receives.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from reqinject.staging.types import StagingSource


class FunctionUnit(BaseModel):
    """One deployable function as declared by the host framework.

    runtime falls back to the provider default when unset; module falls
    back to the service root (".") when unset.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    runtime: Optional[str] = None
    module: Optional[str] = None
    artifact: Optional[str] = None


class DeploymentConfig(BaseModel):
    """Everything the planner reads from the deployment configuration."""

    model_config = ConfigDict(frozen=True)

    service_path: Path = Path(".")
    # Dependencies are shipped as a separate layer; skip injection entirely
    layer: bool = False
    # Each function gets its own archive
    individually: bool = False
    # Dependencies are pre-zipped into .requirements.zip
    zip: bool = False
    # Top-level package names that must never be injected
    no_deploy: tuple[str, ...] = ()
    # provider.runtime; functions without their own runtime inherit it
    default_runtime: Optional[str] = None
    # Shared service archive; unused when packaging individually
    artifact: Optional[str] = None
    functions: tuple[FunctionUnit, ...] = Field(default_factory=tuple)

    @field_validator("no_deploy", mode="before")
    @classmethod
    def coerce_no_deploy(cls, v):
        if v is None:
            return ()
        if isinstance(v, str):
            return (v,)
        return tuple(v)

    @property
    def exclusions(self) -> frozenset[str]:
        return frozenset(self.no_deploy)


@dataclass(frozen=True)
class PlanEntry:
    """One artifact to patch: what to inject, into where, minus what."""

    source: StagingSource
    target_artifact: Path
    exclusions: frozenset[str] = frozenset()
    # None for the shared service artifact
    function_name: Optional[str] = None

    @property
    def label(self) -> str:
        return self.function_name or "service"
