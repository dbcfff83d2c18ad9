"""Application-wide constants for the NPM Plus MCP server.

Centralizes version information, external URLs and detection patterns.
"""

from typing import Dict, List, Tuple

# ==================== VERSION AND PROTOCOL ====================

VERSION = "1.0.0"
MCP_PROTOCOL_VERSION = "2024-11-05"

# Name reported to MCP clients during initialization
SERVER_NAME = "javascript-package-manager"

# Name reported by health endpoints
SERVICE_NAME = "npm-plus-mcp-server"

# ==================== PACKAGE MANAGERS ====================

NPM = "npm"
YARN = "yarn"
PNPM = "pnpm"

PACKAGE_MANAGERS: Tuple[str, ...] = (NPM, YARN, PNPM)

# Ordered by detection priority (most specific first)
LOCK_FILES: List[Tuple[str, str]] = [
    (PNPM, "pnpm-lock.yaml"),
    (YARN, "yarn.lock"),
    (NPM, "package-lock.json"),
]

# ==================== EXTERNAL API URLS ====================

URLS: Dict[str, str] = {
    "NPM_REGISTRY": "https://registry.npmjs.org",
    "NPM_API": "https://api.npmjs.org",
    "BUNDLEPHOBIA_API": "https://bundlephobia.com/api",
    "GITHUB_API": "https://api.github.com",
    "GITHUB_ADVISORY_API": "https://api.github.com/advisories",
    "GITHUB_ADVISORIES_WEBSITE": "https://github.com/advisories",
    "OSV_API": "https://api.osv.dev/v1",
    "OSV_WEBSITE": "https://osv.dev/vulnerability",
}

USER_AGENT = f"npmplus-mcp-server/{VERSION}"

# ==================== SECURITY ====================

NPM_ECOSYSTEM = "npm"

SEVERITY_ORDER: Tuple[str, ...] = ("critical", "high", "moderate", "low", "info")

# ==================== CACHE TTLS (seconds) ====================

SEARCH_CACHE_TTL = 900
PACKAGE_INFO_CACHE_TTL = 3600
BUNDLE_SIZE_CACHE_TTL = 3600
DOWNLOAD_STATS_CACHE_TTL = 300
VULNERABILITY_CACHE_TTL = 3600

DOWNLOAD_PERIOD_DAYS: Dict[str, int] = {
    "last-day": 1,
    "last-week": 7,
    "last-month": 30,
    "last-year": 365,
}

# ==================== USER AGENT DETECTION ====================

EDITOR_PATTERNS: List[Tuple[str, str]] = [
    ("claude", "claude"),
    ("windsurf", "windsurf"),
    ("cursor", "cursor"),
    ("vscode", "vscode"),
    ("cline", "cline"),
    ("vs code", "vscode"),
    ("visual studio code", "vscode"),
]


def detect_editor_from_user_agent(user_agent: str) -> str:
    """Detect the calling editor from a User-Agent string.

    >>> detect_editor_from_user_agent("Claude Desktop/1.0")
    'claude'
    >>> detect_editor_from_user_agent("Custom Browser/1.0")
    'unknown'
    """
    if not user_agent:
        return "unknown"

    ua = user_agent.lower()
    for pattern, name in EDITOR_PATTERNS:
        if pattern in ua:
            return name

    return "unknown"
