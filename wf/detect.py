"""Detection of values in a command line that are likely parameters."""

from __future__ import annotations

import re
from dataclasses import dataclass


@dataclass(frozen=True)
class Suggestion:
    """A span of a command that could become a parameter."""

    original: str
    param_name: str
    start: int
    end: int


COMMON_KEYWORDS = frozenset(
    {
        "HTTP", "HTTPS", "GET", "POST", "PUT", "DELETE", "PATCH", "HEAD",
        "OPTIONS", "SSH", "SCP", "NULL", "TRUE", "FALSE", "EOF", "STDIN",
        "STDOUT", "STDERR", "ASCII", "UTF", "JSON", "XML", "HTML", "CSS",
        "SQL", "API", "URL", "URI", "TCP", "UDP", "DNS", "TLS", "SSL", "FTP",
        "SFTP", "AWS", "GCP", "PID", "TTY", "NFS", "ACL", "ENV", "PATH",
        "HOME", "USER", "TERM", "SHELL", "LANG", "SUDO", "CRON", "YAML",
        "TOML", "CSV", "OK",
    }
)

_IPV4_RE = re.compile(r"\b(\d{1,3}\.\d{1,3}\.\d{1,3}\.\d{1,3})\b", re.ASCII)
_PORT_RE = re.compile(r":(\d{4,5})\b", re.ASCII)
_URL_RE = re.compile(r"https?://\S+", re.ASCII)
_ABS_PATH_RE = re.compile(r"(?:^|\s)(/[\w./-]{3,})", re.ASCII)
_ALL_CAPS_RE = re.compile(r"\b([A-Z][A-Z0-9_]{2,})\b", re.ASCII)
_EMAIL_RE = re.compile(r"\b([\w.]+@[\w.]+\.\w+)\b", re.ASCII)


def _inside(position: int, ranges: list[tuple[int, int]]) -> bool:
    return any(start <= position < end for start, end in ranges)


def detect_params(command: str) -> list[Suggestion]:
    """Return conservative parameter suggestions for ``command``, ordered by position.

    IP addresses, ports and paths that lie inside a URL are not reported
    separately; common upper-case keywords are never suggested.
    """
    suggestions: list[Suggestion] = []

    url_ranges: list[tuple[int, int]] = []
    for match in _URL_RE.finditer(command):
        url_ranges.append(match.span())
        suggestions.append(Suggestion(match.group(), "url", match.start(), match.end()))

    for match in _IPV4_RE.finditer(command):
        if not _inside(match.start(), url_ranges):
            suggestions.append(Suggestion(match.group(), "host", match.start(), match.end()))

    for pattern, name in ((_PORT_RE, "port"), (_ABS_PATH_RE, "path")):
        for match in pattern.finditer(command):
            start, end = match.span(1)
            if not _inside(start, url_ranges):
                suggestions.append(Suggestion(match.group(1), name, start, end))

    for match in _EMAIL_RE.finditer(command):
        suggestions.append(Suggestion(match.group(), "email", match.start(), match.end()))

    for match in _ALL_CAPS_RE.finditer(command):
        word = match.group(1)
        if word in COMMON_KEYWORDS:
            continue
        start, end = match.span(1)
        suggestions.append(Suggestion(word, word.lower(), start, end))

    suggestions.sort(key=lambda suggestion: suggestion.start)
    return suggestions