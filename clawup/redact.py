from __future__ import annotations

import re
from typing import Iterable

TOKENISH = re.compile(r"(?i)(secret|token|password|apikey|api_key)")
HEX_LONG = re.compile(r"\b[0-9a-f]{32,}\b", re.I)
ASSIGNMENT = re.compile(r"(?i)\b(\w*(?:secret|token|password|apikey|api_key)\w*)=(\S+)")

REDACTED = "[REDACTED]"


def redact_string(s: str) -> str:
    """Mask long hex values and KEY=value pairs whose key looks secret."""
    s = ASSIGNMENT.sub(lambda m: f"{m.group(1)}={REDACTED}", s)
    return HEX_LONG.sub(REDACTED, s)


def redact_environment(entries: Iterable[str]) -> list[str]:
    out = []
    for entry in entries:
        key, sep, _ = entry.partition("=")
        if sep and TOKENISH.search(key):
            out.append(f"{key}={REDACTED}")
        else:
            out.append(entry)
    return out

