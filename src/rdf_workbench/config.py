from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, TypedDict, Union

import yaml

from rdf_workbench.errors import ConfigurationError


CONFIG_ENV_VAR = "RDF_WORKBENCH_CONFIG"

DEFAULT_USER_AGENT = "rdf-workbench/0.1 (+https://github.com/rdf-workbench/rdf-workbench)"
CONNECT_TIME_OUT_MS = 5000
READ_TIME_OUT_MS = 30000


class EndpointConfig(TypedDict):
    id: str
    label: str
    sparql_url: str


@dataclass
class HttpConfig:
    connect_timeout_ms: int = CONNECT_TIME_OUT_MS
    read_timeout_ms: int = READ_TIME_OUT_MS
    query_timeout_ms: int = READ_TIME_OUT_MS
    user_agent: str = DEFAULT_USER_AGENT

    @property
    def fetch_timeout(self) -> tuple[float, float]:
        """(connect, read) timeout pair in seconds, as accepted by requests."""

        return (self.connect_timeout_ms / 1000.0, self.read_timeout_ms / 1000.0)


@dataclass
class Settings:
    raw: Dict[str, Any] = field(default_factory=dict)
    http: HttpConfig = field(default_factory=HttpConfig)
    endpoints: List[EndpointConfig] = field(default_factory=list)
    workspace_root: Path = field(default_factory=lambda: Path("."))

    def endpoint(self, endpoint_id: str) -> Optional[EndpointConfig]:
        for ep in self.endpoints:
            if ep["id"] == endpoint_id:
                return ep
        return None


def _load_yaml(path: Path) -> Dict[str, Any]:
    if not path.is_file():
        raise ConfigurationError(
            f"Config file {path} not found; point --config or {CONFIG_ENV_VAR} "
            "at a YAML file."
        )
    with path.open("r", encoding="utf-8") as fh:
        try:
            loaded = yaml.safe_load(fh)
        except yaml.YAMLError as exc:
            raise ConfigurationError(f"{path} is not valid YAML: {exc}") from exc

    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        raise ConfigurationError(
            f"{path}: expected top-level keys such as 'http' and 'endpoints', "
            f"got a {type(loaded).__name__}."
        )
    return loaded


def _endpoint_entry(position: int, entry: Any) -> EndpointConfig:
    if not isinstance(entry, dict):
        raise ConfigurationError(f"endpoints[{position}] should be an id/sparql_url table.")
    missing = [key for key in ("id", "sparql_url") if not entry.get(key)]
    if missing:
        raise ConfigurationError(
            f"endpoints[{position}] has no value for {', '.join(missing)}."
        )
    endpoint_id = str(entry["id"])
    return EndpointConfig(
        id=endpoint_id,
        label=str(entry.get("label") or endpoint_id),
        sparql_url=str(entry["sparql_url"]),
    )


def _coerce_endpoints(section: Any) -> List[EndpointConfig]:
    if section is None:
        return []
    if not isinstance(section, list):
        raise ConfigurationError("'endpoints' holds a list of SPARQL endpoint entries.")
    return [_endpoint_entry(position, entry) for position, entry in enumerate(section)]


def _coerce_http(section: Any) -> HttpConfig:
    if not isinstance(section, dict):
        return HttpConfig()
    try:
        return HttpConfig(
            connect_timeout_ms=int(section.get("connect_timeout_ms", CONNECT_TIME_OUT_MS)),
            read_timeout_ms=int(section.get("read_timeout_ms", READ_TIME_OUT_MS)),
            query_timeout_ms=int(section.get("query_timeout_ms", READ_TIME_OUT_MS)),
            user_agent=str(section.get("user_agent") or DEFAULT_USER_AGENT),
        )
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"Invalid value in 'http' section: {exc}") from exc


def settings_from_mapping(raw: Dict[str, Any]) -> Settings:
    """Build validated Settings from an already-loaded mapping."""

    workspace = raw.get("workspace_root") or "."
    return Settings(
        raw=raw,
        http=_coerce_http(raw.get("http") or {}),
        endpoints=_coerce_endpoints(raw.get("endpoints")),
        workspace_root=Path(str(workspace)).expanduser(),
    )


def load_settings(path: Union[str, Path, None] = None) -> Settings:
    """
    Load and validate the configuration.

    Precedence:
    1. An explicit `path` argument.
    2. The path in RDF_WORKBENCH_CONFIG, if set.
    3. Built-in defaults (no file is read).
    """

    if path is None:
        env_path = os.environ.get(CONFIG_ENV_VAR)
        if not env_path:
            return Settings()
        path = env_path

    return settings_from_mapping(_load_yaml(Path(path).expanduser()))


__all__ = [
    "CONFIG_ENV_VAR",
    "CONNECT_TIME_OUT_MS",
    "READ_TIME_OUT_MS",
    "DEFAULT_USER_AGENT",
    "EndpointConfig",
    "HttpConfig",
    "Settings",
    "load_settings",
    "settings_from_mapping",
]
