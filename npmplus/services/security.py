"""Vulnerability lookups against GitHub Security Advisories and OSV."""

from __future__ import annotations

import asyncio
from typing import Any, Dict, Iterable, List, Optional, Set

from npmplus.constants import NPM_ECOSYSTEM, SEVERITY_ORDER, URLS
from npmplus.logger import session_logger as logger
from npmplus.models.package import SecurityInfo, Vulnerability
from npmplus.services.http_client import HttpClient
from npmplus.services.semver import exact_version, in_affected_range

_GITHUB_SEVERITY = {
    "critical": "critical",
    "high": "high",
    "moderate": "moderate",
    "medium": "moderate",
    "low": "low",
}


def _range_strings(ranges: Iterable[Dict[str, Any]]) -> List[str]:
    versions: List[str] = []
    for rng in ranges:
        for event in rng.get("events") or []:
            if event.get("introduced"):
                versions.append(f">={event['introduced']}")
            if event.get("fixed"):
                versions.append(f"<{event['fixed']}")
    return versions


def overall_severity(vulnerabilities: List[Vulnerability]) -> str:
    present = {v.severity for v in vulnerabilities}
    for severity in SEVERITY_ORDER:
        if severity in present:
            return severity
    return "info"


def map_cvss_score(score: float) -> str:
    if score >= 9.0:
        return "critical"
    if score >= 7.0:
        return "high"
    if score >= 4.0:
        return "moderate"
    if score >= 0.1:
        return "low"
    return "info"


class SecurityService:
    """Service for security vulnerability checking."""

    def __init__(
        self,
        http: HttpClient,
        github_advisory_url: str = URLS["GITHUB_ADVISORY_API"],
        osv_url: str = URLS["OSV_API"],
    ):
        self._http = http
        self.github_advisory_url = github_advisory_url.rstrip("/")
        self.osv_url = osv_url.rstrip("/")

    async def check_vulnerabilities(self, package_name: str, version: Optional[str] = None) -> SecurityInfo:
        """Query both databases; a failing source is logged and skipped.

        Ranges are checked at their base version. Dist-tags cannot be resolved
        here and are treated as "any version".
        """
        version = exact_version(version) if version else None
        gh_result, osv_result = await asyncio.gather(
            self.check_github_advisories(package_name, version),
            self.check_osv(package_name, version),
            return_exceptions=True,
        )

        vulnerabilities: List[Vulnerability] = []
        for source, result in (("github", gh_result), ("osv", osv_result)):
            if isinstance(result, BaseException):
                logger.warning(
                    "Vulnerability source failed",
                    source=source,
                    package=package_name,
                    error=str(result),
                    error_type=type(result).__name__,
                )
                continue
            vulnerabilities.extend(result)

        seen: Set[str] = set()
        unique: List[Vulnerability] = []
        for vuln in vulnerabilities:
            if vuln.id not in seen:
                seen.add(vuln.id)
                unique.append(vuln)

        return SecurityInfo(
            package=package_name,
            version=version,
            vulnerabilities=unique,
            has_vulnerabilities=bool(unique),
            severity=overall_severity(unique),  # type: ignore[arg-type]
        )

    async def check_github_advisories(self, package_name: str, version: Optional[str] = None) -> List[Vulnerability]:
        version = exact_version(version) if version else None
        advisories = await self._http.get_json(
            self.github_advisory_url,
            params={"ecosystem": NPM_ECOSYSTEM, "affects": package_name},
            headers={"Accept": "application/vnd.github+json"},
        )
        return [
            self._transform_github_advisory(advisory)
            for advisory in advisories or []
            if self._is_affected(advisory, package_name, version)
        ]

    async def check_osv(self, package_name: str, version: Optional[str] = None) -> List[Vulnerability]:
        version = exact_version(version) if version else None
        query: Dict[str, Any] = {"package": {"ecosystem": NPM_ECOSYSTEM, "name": package_name}}
        if version:
            query["version"] = version
        data = await self._http.post_json(f"{self.osv_url}/query", query)
        return [self._transform_osv(vuln) for vuln in (data or {}).get("vulns") or []]

    @staticmethod
    def _is_affected(advisory: Dict[str, Any], package_name: str, version: Optional[str]) -> bool:
        for vuln in advisory.get("vulnerabilities") or []:
            pkg = vuln.get("package") or {}
            if pkg.get("ecosystem") != NPM_ECOSYSTEM or pkg.get("name") != package_name:
                continue
            if not version:
                return True
            patched = vuln.get("first_patched_version")
            if isinstance(patched, dict):
                patched = patched.get("identifier")
            if in_affected_range(version, None, patched):
                return True
        return False

    @staticmethod
    def _transform_github_advisory(advisory: Dict[str, Any]) -> Vulnerability:
        ghsa_id = advisory.get("ghsa_id") or str(advisory.get("id", ""))
        description = advisory.get("description") or ""
        if "upgrade" in description.lower() or "update" in description.lower():
            recommendation = "Upgrade to a patched version"
        else:
            recommendation = "Review advisory for specific recommendations"

        versions: List[str] = []
        for vuln in advisory.get("vulnerabilities") or []:
            if vuln.get("vulnerable_version_range"):
                versions.append(vuln["vulnerable_version_range"])
            patched = vuln.get("first_patched_version")
            if isinstance(patched, dict):
                patched = patched.get("identifier")
            if patched:
                versions.append(f"<{patched}")

        return Vulnerability(
            id=ghsa_id,
            title=advisory.get("summary") or ghsa_id,
            severity=_GITHUB_SEVERITY.get((advisory.get("severity") or "").lower(), "info"),  # type: ignore[arg-type]
            url=advisory.get("html_url") or f"{URLS['GITHUB_ADVISORIES_WEBSITE']}/{ghsa_id}",
            overview=description or advisory.get("summary"),
            recommendation=advisory.get("recommendation") or recommendation,
            versions=list(dict.fromkeys(versions)),
            published=advisory.get("published_at"),
            updated=advisory.get("updated_at"),
            source="github",
        )

    @staticmethod
    def _osv_severity(vuln: Dict[str, Any]) -> str:
        for entry in vuln.get("severity") or []:
            if entry.get("type") == "CVSS_V3":
                try:
                    return map_cvss_score(float(entry.get("score")))
                except (TypeError, ValueError):
                    # Vector strings like "CVSS:3.1/AV:N/..." carry no bare score
                    break
        label = ((vuln.get("database_specific") or {}).get("severity") or "").lower()
        return _GITHUB_SEVERITY.get(label, "info")

    def _transform_osv(self, vuln: Dict[str, Any]) -> Vulnerability:
        details = vuln.get("details") or ""
        summary = vuln.get("summary")
        versions: List[str] = []
        for affected in vuln.get("affected") or []:
            versions.extend(_range_strings(affected.get("ranges") or []))

        return Vulnerability(
            id=vuln["id"],
            title=summary or (details[:100] + "..." if len(details) > 100 else details) or vuln["id"],
            severity=self._osv_severity(vuln),  # type: ignore[arg-type]
            url=f"{URLS['OSV_WEBSITE']}/{vuln['id']}",
            overview=details or summary,
            recommendation=(vuln.get("database_specific") or {}).get("recommendation")
            or "Check vulnerability details for remediation steps",
            versions=list(dict.fromkeys(versions)),
            published=vuln.get("published"),
            updated=vuln.get("modified") or vuln.get("published"),
            source="osv",
        )
