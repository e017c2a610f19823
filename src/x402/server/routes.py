"""
Route matching for priced resources
"""

import re
from dataclasses import dataclass
from urllib.parse import unquote

from x402.server.x402_server import RouteConfig, RoutesConfig
from x402.types import PaymentPayload, PaymentRequirements

_SEGMENT = re.compile(r"(\*|\[[^\]/]+\])")


@dataclass(frozen=True)
class RoutePattern:
    """A compiled route key such as ``"GET /weather/[city]"``"""

    verb: str
    pattern: re.Pattern[str]
    config: RouteConfig


def _path_to_regex(path: str) -> re.Pattern[str]:
    parts = []
    for part in _SEGMENT.split(path):
        if part == "*":
            parts.append(".*?")
        elif part.startswith("[") and part.endswith("]"):
            parts.append("[^/]+")
        else:
            parts.append(re.escape(part))
    return re.compile("^" + "".join(parts) + "$", re.IGNORECASE)


def compute_route_patterns(routes: RoutesConfig) -> list[RoutePattern]:
    """Compile route keys.

    A key is ``"<VERB> <path>"`` or just ``"<path>"`` (any verb). ``*`` matches
    any run of characters and ``[name]`` matches one path segment. A bare
    price value is shorthand for a RouteConfig on the default network.
    """
    patterns = []
    for key, value in routes.items():
        parts = key.strip().split(None, 1)
        verb, path = (parts[0].upper(), parts[1]) if len(parts) == 2 else ("*", parts[0])
        config = value if isinstance(value, RouteConfig) else RouteConfig(price=value)
        patterns.append(RoutePattern(verb=verb, pattern=_path_to_regex(path), config=config))
    return patterns


def find_matching_route(
    patterns: list[RoutePattern],
    path: str,
    method: str,
) -> RoutePattern | None:
    """Return the most specific pattern matching *method* and *path*."""
    normalized = unquote(path.split("?", 1)[0].split("#", 1)[0]) or "/"
    method = method.upper()

    matches = [
        p
        for p in patterns
        if (p.verb == "*" or p.verb == method) and p.pattern.match(normalized)
    ]
    if not matches:
        return None
    return max(matches, key=lambda p: len(p.pattern.pattern))


def find_matching_payment_requirements(
    accepts: list[PaymentRequirements],
    payload: PaymentPayload,
) -> PaymentRequirements | None:
    """Find the offered requirement with the payload's scheme and network."""
    for requirements in accepts:
        if requirements.scheme == payload.scheme and requirements.network == payload.network:
            return requirements
    return None
