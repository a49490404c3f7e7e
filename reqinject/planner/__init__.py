"""Planner module: turns a deployment configuration into an injection plan.

Public API:
    build_plan(config, settings) -> tuple[PlanEntry, ...]
    load_deployment_config(path) -> DeploymentConfig
"""

from reqinject.planner.loader import load_deployment_config, parse_deployment_config
from reqinject.planner.planner import build_plan, is_python_runtime
from reqinject.planner.types import DeploymentConfig, FunctionUnit, PlanEntry

__all__ = [
    "DeploymentConfig",
    "FunctionUnit",
    "PlanEntry",
    "build_plan",
    "is_python_runtime",
    "load_deployment_config",
    "parse_deployment_config",
]
