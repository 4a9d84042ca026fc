"""
Structured service status parsed from compose / docker inspect JSON.
"""

import json
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional


class ServiceState(Enum):
    """Container lifecycle states."""
    RUNNING = "running"
    RESTARTING = "restarting"
    CREATED = "created"
    PAUSED = "paused"
    EXITED = "exited"
    DEAD = "dead"
    REMOVING = "removing"
    MISSING = "missing"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, value: Optional[str]) -> "ServiceState":
        if not value:
            return cls.UNKNOWN
        try:
            return cls(value.strip().lower())
        except ValueError:
            return cls.UNKNOWN


class HealthState(Enum):
    """Docker healthcheck results."""
    HEALTHY = "healthy"
    UNHEALTHY = "unhealthy"
    STARTING = "starting"
    NONE = "none"

    @classmethod
    def parse(cls, value: Optional[str]) -> "HealthState":
        if not value:
            return cls.NONE
        try:
            return cls(value.strip().lower())
        except ValueError:
            return cls.NONE


@dataclass
class ServiceStatus:
    """Status of one compose service."""
    service: str
    state: ServiceState
    health: HealthState = HealthState.NONE
    container: Optional[str] = None

    @property
    def running(self) -> bool:
        return self.state is ServiceState.RUNNING

    @property
    def ok(self) -> bool:
        return self.running and self.health is not HealthState.UNHEALTHY


def _load_ps_entries(output: str) -> List[Dict[str, Any]]:
    """
    Load ``compose ps --format json`` output.

    Compose releases before 2.21 print one JSON array; later ones print one
    JSON object per line.
    """
    text = output.strip()
    if not text:
        return []

    try:
        data = json.loads(text)
    except json.JSONDecodeError:
        entries = []
        for line in text.splitlines():
            line = line.strip()
            if not line:
                continue
            try:
                entry = json.loads(line)
            except json.JSONDecodeError:
                continue  # Skip non-JSON noise such as warnings
            if isinstance(entry, dict):
                entries.append(entry)
        return entries

    if isinstance(data, dict):
        return [data]
    if isinstance(data, list):
        return [e for e in data if isinstance(e, dict)]
    return []


def parse_ps_json(output: str, service: str) -> ServiceStatus:
    """
    Find a service in ``compose ps --format json`` output.

    Args:
        output: Raw stdout of the ps command
        service: Compose service name

    Returns:
        ServiceStatus, MISSING when the service has no container
    """
    for entry in _load_ps_entries(output):
        if entry.get("Service") != service:
            continue
        return ServiceStatus(
            service=service,
            state=ServiceState.parse(entry.get("State")),
            health=HealthState.parse(entry.get("Health")),
            container=entry.get("Name") or entry.get("ID"),
        )
    return ServiceStatus(service=service, state=ServiceState.MISSING)


def parse_inspect_state(output: str, service: str, container: Optional[str] = None) -> ServiceStatus:
    """Parse ``docker inspect --format '{{json .State}}'`` output."""
    try:
        state = json.loads(output.strip() or "null")
    except json.JSONDecodeError:
        state = None

    if not isinstance(state, dict):
        return ServiceStatus(service=service, state=ServiceState.UNKNOWN, container=container)

    health = state.get("Health") or {}
    return ServiceStatus(
        service=service,
        state=ServiceState.parse(state.get("Status")),
        health=HealthState.parse(health.get("Status") if isinstance(health, dict) else None),
        container=container,
    )
