"""Tests for SecurityService."""

import json

import httpx
import pytest

from npmplus.models.package import Vulnerability
from npmplus.services.security import map_cvss_score, overall_severity

GITHUB_ADVISORIES = "https://api.github.com/advisories"
OSV_QUERY = "https://api.osv.dev/v1/query"

GHSA = {
    "ghsa_id": "GHSA-p6mc-m468-83gw",
    "summary": "Prototype Pollution in lodash",
    "description": "Upgrade to version 4.17.19 or later.",
    "severity": "high",
    "html_url": "https://github.com/advisories/GHSA-p6mc-m468-83gw",
    "published_at": "2020-07-15T19:15:48Z",
    "updated_at": "2023-01-01T00:00:00Z",
    "vulnerabilities": [
        {
            "package": {"ecosystem": "npm", "name": "lodash"},
            "vulnerable_version_range": "< 4.17.19",
            "first_patched_version": "4.17.19",
        }
    ],
}

OSV_VULN = {
    "id": "GHSA-29mw-wpgm-hmr9",
    "summary": "ReDoS in lodash",
    "details": "Lodash versions prior to 4.17.21 are vulnerable to ReDoS.",
    "severity": [{"type": "CVSS_V3", "score": "5.3"}],
    "affected": [{"ranges": [{"type": "SEMVER", "events": [{"introduced": "0"}, {"fixed": "4.17.21"}]}]}],
    "published": "2022-01-06T20:30:46Z",
    "modified": "2023-11-01T00:00:00Z",
}


def make_vuln(vuln_id: str, severity: str) -> Vulnerability:
    return Vulnerability(id=vuln_id, title=vuln_id, severity=severity, url="https://x", source="osv")


class TestSeverityHelpers:
    def test_cvss_buckets(self):
        assert map_cvss_score(9.8) == "critical"
        assert map_cvss_score(7.0) == "high"
        assert map_cvss_score(5.3) == "moderate"
        assert map_cvss_score(0.1) == "low"
        assert map_cvss_score(0.0) == "info"

    def test_overall_severity_is_highest(self):
        assert overall_severity([make_vuln("a", "low"), make_vuln("b", "critical")]) == "critical"
        assert overall_severity([]) == "info"


class TestCheckVulnerabilities:
    @pytest.mark.asyncio
    async def test_combines_sources(self, security, respx_mock):
        gh_route = respx_mock.get(GITHUB_ADVISORIES).mock(return_value=httpx.Response(200, json=[GHSA]))
        osv_route = respx_mock.post(OSV_QUERY).mock(return_value=httpx.Response(200, json={"vulns": [OSV_VULN]}))

        info = await security.check_vulnerabilities("lodash", "4.17.15")

        assert gh_route.calls.last.request.url.params["affects"] == "lodash"
        assert b'"version"' in osv_route.calls.last.request.content
        assert info.has_vulnerabilities
        assert info.severity == "high"
        ids = [v.id for v in info.vulnerabilities]
        assert ids == ["GHSA-p6mc-m468-83gw", "GHSA-29mw-wpgm-hmr9"]

        osv = info.vulnerabilities[1]
        assert osv.source == "osv"
        assert osv.severity == "moderate"
        assert osv.versions == [">=0", "<4.17.21"]
        assert osv.url == "https://osv.dev/vulnerability/GHSA-29mw-wpgm-hmr9"

        gh = info.vulnerabilities[0]
        assert gh.recommendation == "Upgrade to a patched version"
        assert gh.versions == ["< 4.17.19", "<4.17.19"]

    @pytest.mark.asyncio
    async def test_patched_version_filtered_out(self, security, respx_mock):
        respx_mock.get(GITHUB_ADVISORIES).mock(return_value=httpx.Response(200, json=[GHSA]))
        respx_mock.post(OSV_QUERY).mock(return_value=httpx.Response(200, json={}))

        info = await security.check_vulnerabilities("lodash", "4.17.21")

        assert not info.has_vulnerabilities
        assert info.severity == "info"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("version", ["^4.17.21", ">=4.17.21", "=4.17.21"])
    async def test_range_checked_at_base_version(self, security, respx_mock, version):
        respx_mock.get(GITHUB_ADVISORIES).mock(return_value=httpx.Response(200, json=[GHSA]))
        osv_route = respx_mock.post(OSV_QUERY).mock(return_value=httpx.Response(200, json={}))

        info = await security.check_vulnerabilities("lodash", version)

        assert not info.has_vulnerabilities
        assert info.version == "4.17.21"
        assert json.loads(osv_route.calls.last.request.content)["version"] == "4.17.21"

    @pytest.mark.asyncio
    async def test_single_source_accepts_ranges(self, security, respx_mock):
        respx_mock.get(GITHUB_ADVISORIES).mock(return_value=httpx.Response(200, json=[GHSA]))
        assert await security.check_github_advisories("lodash", "^4.17.21") == []
        assert len(await security.check_github_advisories("lodash", "^4.17.15")) == 1

    @pytest.mark.asyncio
    async def test_dist_tag_is_not_sent_as_version(self, security, respx_mock):
        respx_mock.get(GITHUB_ADVISORIES).mock(return_value=httpx.Response(200, json=[GHSA]))
        osv_route = respx_mock.post(OSV_QUERY).mock(return_value=httpx.Response(200, json={}))

        info = await security.check_vulnerabilities("lodash", "latest")

        assert "version" not in json.loads(osv_route.calls.last.request.content)
        assert [v.id for v in info.vulnerabilities] == [GHSA["ghsa_id"]]

    @pytest.mark.asyncio
    async def test_deduplicates_by_id(self, security, respx_mock):
        duplicate = dict(OSV_VULN, id=GHSA["ghsa_id"])
        respx_mock.get(GITHUB_ADVISORIES).mock(return_value=httpx.Response(200, json=[GHSA]))
        respx_mock.post(OSV_QUERY).mock(return_value=httpx.Response(200, json={"vulns": [duplicate]}))

        info = await security.check_vulnerabilities("lodash")

        assert len(info.vulnerabilities) == 1
        assert info.vulnerabilities[0].source == "github"

    @pytest.mark.asyncio
    async def test_failing_source_is_skipped(self, security, respx_mock):
        respx_mock.get(GITHUB_ADVISORIES).mock(return_value=httpx.Response(403))
        respx_mock.post(OSV_QUERY).mock(return_value=httpx.Response(200, json={"vulns": [OSV_VULN]}))

        info = await security.check_vulnerabilities("lodash", "4.17.15")

        assert [v.id for v in info.vulnerabilities] == ["GHSA-29mw-wpgm-hmr9"]

    @pytest.mark.asyncio
    async def test_both_sources_fail(self, security, respx_mock):
        respx_mock.get(GITHUB_ADVISORIES).mock(side_effect=httpx.ConnectError("down"))
        respx_mock.post(OSV_QUERY).mock(side_effect=httpx.ConnectError("down"))

        info = await security.check_vulnerabilities("lodash")

        assert info.vulnerabilities == []
        assert info.severity == "info"


class TestOsvSeverity:
    def test_database_specific_label(self, security):
        vuln = {"id": "X", "database_specific": {"severity": "CRITICAL"}}
        assert security._transform_osv(vuln).severity == "critical"

    def test_cvss_vector_without_score_falls_back(self, security):
        vuln = {
            "id": "X",
            "severity": [{"type": "CVSS_V3", "score": "CVSS:3.1/AV:N/AC:L/PR:N/UI:N/S:U/C:H/I:H/A:H"}],
            "database_specific": {"severity": "MODERATE"},
        }
        assert security._osv_severity(vuln) == "moderate"

    def test_unknown(self, security):
        assert security._osv_severity({"id": "X"}) == "info"
