"""serverless.yml-style descriptor loader.

Reads only the keys injection depends on:

    provider:
      runtime: python3.12
    package:
      individually: true
      artifact: .serverless/service.zip
    functions:
      <name>:
        runtime: python3.11
        module: handlers/api
        package:
          artifact: .serverless/<name>.zip
    custom:
      pythonRequirements:
        layer: true        # or a mapping of layer options
        zip: false
        noDeploy: [boto3, botocore]

Everything else in the file is ignored.
"""

import logging
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import ValidationError

from reqinject.errors import InvalidConfigurationError
from reqinject.planner.types import DeploymentConfig

logger = logging.getLogger(__name__)


def load_deployment_config(path: Path, service_path: Optional[Path] = None) -> DeploymentConfig:
    """Load a deployment descriptor from disk.

    service_path defaults to the directory containing the descriptor.

    Raises:
        InvalidConfigurationError: If the file is unreadable, not YAML, or malformed.
    """
    path = Path(path)
    try:
        content = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise InvalidConfigurationError(f"Could not read {path}: {exc}", path) from exc

    try:
        data = yaml.safe_load(content)
    except yaml.YAMLError as exc:
        raise InvalidConfigurationError(f"YAML parse error in {path.name}: {exc}", path) from exc

    return parse_deployment_config(
        data,
        service_path=service_path if service_path is not None else path.parent,
    )


def parse_deployment_config(data: Any, service_path: Path = Path(".")) -> DeploymentConfig:
    """Build a DeploymentConfig from an already-parsed descriptor mapping."""
    if not isinstance(data, dict):
        raise InvalidConfigurationError("Deployment descriptor must be a mapping")

    provider = _section(data, "provider")
    package = _section(data, "package")
    options = _section(_section(data, "custom"), "pythonRequirements")

    functions: list[dict[str, Any]] = []
    for name, spec in _section(data, "functions").items():
        spec = spec or {}
        if not isinstance(spec, dict):
            raise InvalidConfigurationError(f"Function '{name}' must be a mapping")
        functions.append({
            "name": str(name),
            "runtime": spec.get("runtime"),
            "module": spec.get("module"),
            "artifact": _section(spec, "package").get("artifact"),
        })

    fields: dict[str, Any] = {
        "service_path": service_path,
        # Any truthy layer value (including a mapping of layer options) enables it
        "layer": bool(options.get("layer")),
        "individually": bool(package.get("individually", False)),
        "zip": bool(options.get("zip", False)),
        "no_deploy": options.get("noDeploy") or (),
        "artifact": package.get("artifact"),
        "functions": tuple(functions),
    }
    if provider.get("runtime"):
        fields["default_runtime"] = provider["runtime"]

    try:
        config = DeploymentConfig(**fields)
    except ValidationError as exc:
        raise InvalidConfigurationError(f"Invalid deployment descriptor: {exc}") from exc

    logger.debug(
        "Loaded deployment config: %d function(s), individually=%s, zip=%s, layer=%s",
        len(config.functions),
        config.individually,
        config.zip,
        config.layer,
    )
    return config


def _section(data: dict, key: str) -> dict:
    value = data.get(key) or {}
    if not isinstance(value, dict):
        raise InvalidConfigurationError(f"'{key}' must be a mapping")
    return value
