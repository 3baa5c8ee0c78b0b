"""Allow-lists and deny-lists used by the validators.

Kept as plain data so the tables can be tested and extended without
touching validator control flow.
"""

import re
from typing import FrozenSet, List, Pattern

MAX_COMMAND_LENGTH = 2000
MAX_PACKAGE_NAME_LENGTH = 214

# Executables that only take arguments and stay inside the sandbox
ALLOWED_COMMANDS: FrozenSet[str] = frozenset(
    {
        # File listing / reading
        "cat",
        "ls",
        "pwd",
        "find",
        "head",
        "tail",
        "wc",
        "grep",
        "which",
        "env",
        "echo",
        # File writing
        "mkdir",
        "cp",
        "mv",
        "rm",
        # Package manager and interpreter
        "npm",
        "npx",
        "node",
        # Build tools
        "vite",
        "tsc",
        "eslint",
        "prettier",
    }
)

BLOCKED_COMMAND_PATTERNS: List[Pattern[str]] = [
    re.compile(r"[;&|`$]"),  # Shell metacharacters
    re.compile(r"\.\./"),  # Path traversal
    re.compile(r"/etc/"),
    re.compile(r"/proc/"),
    re.compile(r"/sys/"),
    re.compile(r"\bsudo\b"),
    re.compile(r"\bcurl\b"),  # Outbound fetches go through the scrape API
    re.compile(r"\bwget\b"),
    re.compile(r"\bchmod\b"),
    re.compile(r"\bchown\b"),
    re.compile(r"\bdd\b"),
    re.compile(r"\bmkfs\b"),
    re.compile(r"\bkill\b"),
    re.compile(r"\bpkill\b"),
    re.compile(r"\breboot\b"),
    re.compile(r"\bshutdown\b"),
]

BLOCKED_HOSTNAMES: FrozenSet[str] = frozenset(
    {
        "localhost",
        "127.0.0.1",
        "0.0.0.0",
        "::1",
        "[::1]",
        "metadata.google.internal",
        "169.254.169.254",  # AWS/GCP metadata endpoint
    }
)

BLOCKED_HOSTNAME_PATTERNS: List[Pattern[str]] = [
    re.compile(r"^127\.\d{1,3}\.\d{1,3}\.\d{1,3}$"),  # 127.0.0.0/8 loopback
    re.compile(r"^10\.\d{1,3}\.\d{1,3}\.\d{1,3}$"),  # 10.0.0.0/8
    re.compile(r"^172\.(1[6-9]|2\d|3[01])\.\d{1,3}\.\d{1,3}$"),  # 172.16.0.0/12
    re.compile(r"^192\.168\.\d{1,3}\.\d{1,3}$"),  # 192.168.0.0/16
    re.compile(r"^169\.254\.\d{1,3}\.\d{1,3}$"),  # 169.254.0.0/16 link local
    re.compile(r"^f[cd][0-9a-f]{2}:", re.IGNORECASE),  # fc00::/7 unique local
    re.compile(r"^fe[89ab][0-9a-f]:", re.IGNORECASE),  # fe80::/10 link local
]

ALLOWED_URL_SCHEMES: FrozenSet[str] = frozenset({"http", "https"})

PACKAGE_NAME_PATTERN: Pattern[str] = re.compile(
    r"^(@[a-z0-9\-~][a-z0-9\-._~]*/)?[a-z0-9\-~][a-z0-9\-._~]*(@[\w.^~>=<|\-]+)?$",
    re.ASCII,
)
