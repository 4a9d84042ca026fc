from .model import ComposeService, HealthCheck, OrchestrationManifest
from .render import TOKEN_ENV, build_manifest, generate_manifest, load_manifest, write_manifest

__all__ = [
    "ComposeService",
    "HealthCheck",
    "OrchestrationManifest",
    "TOKEN_ENV",
    "build_manifest",
    "generate_manifest",
    "load_manifest",
    "write_manifest",
]
