"""
Hostname patterns as matched against request host headers.

A pattern is either an exact hostname (``chat.example.com``) or a single-level
leading wildcard (``*.example.com``). Patterns are normalized to lowercase
without a trailing dot, so comparisons are case-insensitive. A wildcard
matches exactly one extra label: ``*.example.com`` matches ``a.example.com``
but neither ``example.com`` nor ``a.b.example.com``.
"""

import re
from dataclasses import dataclass

from routing.errors import InvalidHostname

WILDCARD_LABEL = "*"
MAX_HOSTNAME_LENGTH = 253

_LABEL = re.compile(r"^[a-z0-9]([a-z0-9-]{0,61}[a-z0-9])?$")


def normalize_hostname(hostname: str) -> str:
    return hostname.strip().lower().rstrip(".")


@dataclass(frozen=True, order=True)
class HostnamePattern:
    """Normalized hostname or ``*.<suffix>`` wildcard."""

    text: str

    @classmethod
    def parse(cls, raw: str) -> "HostnamePattern":
        """
        Normalize and validate a hostname pattern.

        Raises:
            InvalidHostname: If the pattern is empty, too long, has a
                malformed label, or uses ``*`` anywhere but as the whole
                leftmost label.
        """
        text = normalize_hostname(raw)
        if not text:
            raise InvalidHostname(raw, "empty hostname")
        if len(text) > MAX_HOSTNAME_LENGTH:
            raise InvalidHostname(raw, f"longer than {MAX_HOSTNAME_LENGTH} characters")

        labels = text.split(".")
        if labels[0] == WILDCARD_LABEL:
            if len(labels) < 3:
                raise InvalidHostname(raw, "wildcard suffix must have at least two labels")
            labels = labels[1:]
        for label in labels:
            if not _LABEL.match(label):
                raise InvalidHostname(raw, f"malformed label {label!r}")
        return cls(text)

    @property
    def is_wildcard(self) -> bool:
        return self.text.startswith(f"{WILDCARD_LABEL}.")

    @property
    def suffix(self) -> str:
        """Domain under the wildcard, or the hostname itself when exact."""
        return self.text[2:] if self.is_wildcard else self.text

    def sort_key(self) -> tuple[str, ...]:
        # Root-first labels: "example.com" sorts before "chat.example.com".
        return tuple(reversed(self.text.split(".")))

    def matches(self, hostname: str) -> bool:
        """Whether a concrete host header value is matched by this pattern."""
        host = normalize_hostname(hostname)
        if not self.is_wildcard:
            return host == self.text
        head, dot, rest = host.partition(".")
        return bool(head) and bool(dot) and rest == self.suffix

    def covers(self, other: "HostnamePattern") -> bool:
        """
        Whether every host matched by ``other`` is also matched by self.

        Wildcards only cover wildcards at the same level, i.e. themselves.
        """
        if other.is_wildcard:
            return other == self
        return self.matches(other.text)

    def within(self, domain: str) -> bool:
        """Whether the pattern (or its wildcard suffix) lies in ``domain``."""
        domain = normalize_hostname(domain)
        return self.suffix == domain or self.suffix.endswith(f".{domain}")

    def __str__(self) -> str:
        return self.text
