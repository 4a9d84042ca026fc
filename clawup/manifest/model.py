"""
Typed model of the docker-compose document written for the gateway.
"""

from typing import Dict, List, Optional

import yaml
from pydantic import BaseModel

from ..config import SERVICE_NAME


class HealthCheck(BaseModel):
    """Compose healthcheck block."""
    test: List[str]
    interval: str
    timeout: str
    retries: int


class ComposeService(BaseModel):
    """A single compose service definition."""
    image: str
    container_name: str
    restart: str
    ports: List[str]
    volumes: List[str]
    environment: List[str]
    healthcheck: HealthCheck
    command: List[str]

    def env(self, name: str) -> Optional[str]:
        """Return the value of NAME from the KEY=value environment list."""
        prefix = f"{name}="
        for entry in self.environment:
            if entry.startswith(prefix):
                return entry[len(prefix):]
        return None


class OrchestrationManifest(BaseModel):
    """The whole compose file: one service keyed by its name."""
    services: Dict[str, ComposeService]

    @property
    def gateway(self) -> ComposeService:
        return self.services[SERVICE_NAME]

    def to_yaml(self) -> str:
        data = self.model_dump()
        for service in data["services"].values():
            service["ports"] = [_Quoted(p) for p in service["ports"]]
        return yaml.dump(data, Dumper=_ManifestDumper, sort_keys=False, default_flow_style=False, allow_unicode=True)

    @classmethod
    def from_yaml(cls, text: str) -> "OrchestrationManifest":
        return cls.model_validate(yaml.safe_load(text) or {})


class _Quoted(str):
    pass


class _ManifestDumper(yaml.SafeDumper):
    pass


def _represent_quoted(dumper: yaml.SafeDumper, value: _Quoted):
    # "host:container" port pairs can read as base-60 ints to YAML 1.1 parsers
    return dumper.represent_scalar("tag:yaml.org,2002:str", str(value), style='"')


_ManifestDumper.add_representer(_Quoted, _represent_quoted)
