"""Runs npm, yarn and pnpm as subprocesses."""

from __future__ import annotations

import asyncio
import contextlib
import json
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

from npmplus.constants import LOCK_FILES, NPM, PNPM, YARN
from npmplus.exceptions import InvalidInputError, PackageManagerError
from npmplus.logger import session_logger as logger
from npmplus.models.package import PackageOperation, PackageOperationResult

AUDIT_LEVELS = ("info", "low", "moderate", "high", "critical")


@dataclass
class CommandOutput:
    """Captured output of one package manager invocation."""

    stdout: str
    stderr: str
    exit_code: int


def detect_package_manager(cwd: Path) -> str:
    """Pick the manager whose lock file is present; npm when none is."""
    for manager, lock_file in LOCK_FILES:
        if (cwd / lock_file).exists():
            return manager
    return NPM


def summarize_npm_audit(stdout: str) -> Optional[Dict[str, Any]]:
    """Summarize ``npm audit --json`` output; None when it is not JSON."""
    try:
        data = json.loads(stdout)
    except ValueError:
        return None
    if not isinstance(data, dict):
        return None
    metadata = data.get("metadata") or {}
    counts = metadata.get("vulnerabilities") or {}
    vulnerabilities = {level: int(counts.get(level) or 0) for level in AUDIT_LEVELS}
    dependencies = metadata.get("dependencies")
    if isinstance(dependencies, dict):
        total_dependencies = dependencies.get("total")
    else:
        # npm 6 reports a flat count
        total_dependencies = metadata.get("totalDependencies")
    return {
        "total_dependencies": total_dependencies,
        "vulnerabilities": vulnerabilities,
        "total": sum(vulnerabilities.values()),
    }


class PackageManagerService:
    """Builds per-manager command lines and runs them with a timeout."""

    def __init__(self, timeout: float = 60.0):
        self.timeout = timeout

    # ------------------------------------------------------------------ #
    # Operations
    # ------------------------------------------------------------------ #

    async def install(
        self,
        packages: List[str],
        cwd: Path,
        manager: str,
        dev: bool = False,
        global_: bool = False,
    ) -> PackageOperationResult:
        args = self.build_install_args(packages, manager, dev=dev, global_=global_)
        return await self._run("install", packages, manager, args, cwd)

    async def update(self, packages: Optional[List[str]], cwd: Path, manager: str) -> PackageOperationResult:
        args = self.build_update_args(packages, manager)
        return await self._run("update", packages or ["all packages"], manager, args, cwd)

    async def remove(
        self, packages: List[str], cwd: Path, manager: str, global_: bool = False
    ) -> PackageOperationResult:
        args = self.build_remove_args(packages, manager, global_=global_)
        return await self._run("remove", packages, manager, args, cwd)

    async def check_outdated(self, cwd: Path, manager: str, global_: bool = False) -> PackageOperationResult:
        args = self.build_outdated_args(manager, global_=global_)
        # outdated exits 1 when anything is outdated
        return await self._run("outdated", ["outdated check"], manager, args, cwd, allow_failure=True)

    async def audit(
        self,
        cwd: Path,
        manager: str,
        fix: bool = False,
        force: bool = False,
        production: bool = False,
    ) -> PackageOperationResult:
        args = self.build_audit_args(manager, fix=fix, force=force, production=production)
        # audit exits non-zero when vulnerabilities are found
        return await self._run("audit", ["audit"], manager, args, cwd, allow_failure=True)

    async def clean_cache(self, cwd: Path, manager: str, global_: bool = False) -> PackageOperationResult:
        args = self.build_clean_args(manager, global_=global_)
        return await self._run("clean_cache", ["cache"], manager, args, cwd)

    async def list_dependencies(
        self, cwd: Path, manager: str, depth: int = 3, production: bool = False
    ) -> PackageOperationResult:
        args = self.build_list_args(manager, depth=depth, production=production)
        # npm ls exits 1 on missing/extraneous packages but still prints the tree
        return await self._run("list", ["dependency tree"], manager, args, cwd, allow_failure=True)

    # ------------------------------------------------------------------ #
    # Argument builders
    # ------------------------------------------------------------------ #

    @staticmethod
    def build_install_args(packages: List[str], manager: str, dev: bool = False, global_: bool = False) -> List[str]:
        if manager == NPM:
            args = ["install"]
            if global_:
                args.append("--global")
            if dev:
                args.append("--save-dev")
        elif manager == YARN:
            args = ["global", "add"] if global_ else ["add"]
            if dev:
                args.append("--dev")
        elif manager == PNPM:
            args = ["add"]
            if global_:
                args.append("--global")
            if dev:
                args.append("--save-dev")
        else:
            raise InvalidInputError(f"Unknown package manager: {manager}")
        return args + list(packages)

    @staticmethod
    def build_update_args(packages: Optional[List[str]], manager: str) -> List[str]:
        commands = {NPM: ["update"], YARN: ["upgrade"], PNPM: ["update"]}
        if manager not in commands:
            raise InvalidInputError(f"Unknown package manager: {manager}")
        return commands[manager] + list(packages or [])

    @staticmethod
    def build_remove_args(packages: List[str], manager: str, global_: bool = False) -> List[str]:
        if manager == NPM:
            args = ["uninstall"] + (["--global"] if global_ else [])
        elif manager == YARN:
            args = ["global", "remove"] if global_ else ["remove"]
        elif manager == PNPM:
            args = ["remove"] + (["--global"] if global_ else [])
        else:
            raise InvalidInputError(f"Unknown package manager: {manager}")
        return args + list(packages)

    @staticmethod
    def build_outdated_args(manager: str, global_: bool = False) -> List[str]:
        if manager not in (NPM, YARN, PNPM):
            raise InvalidInputError(f"Unknown package manager: {manager}")
        if not global_:
            return ["outdated"]
        if manager == YARN:
            return ["global", "outdated"]
        return ["outdated", "--global"]

    @staticmethod
    def build_audit_args(manager: str, fix: bool = False, force: bool = False, production: bool = False) -> List[str]:
        args = ["audit"]
        if manager == NPM:
            if fix:
                args.append("fix")
                if force:
                    args.append("--force")
            if production:
                args.append("--omit=dev")
            args.append("--json")
        elif manager == YARN:
            if fix:
                raise InvalidInputError(
                    "Yarn doesn't support audit fix. Update the affected packages manually."
                )
            if production:
                args.append("--groups=dependencies")
        elif manager == PNPM:
            if fix:
                args.append("--fix")
            if production:
                args.append("--prod")
        else:
            raise InvalidInputError(f"Unknown package manager: {manager}")
        return args

    @staticmethod
    def build_clean_args(manager: str, global_: bool = False) -> List[str]:
        if manager == NPM:
            return ["cache", "clean", "--force"] + (["--global"] if global_ else [])
        if manager == YARN:
            return ["cache", "clean"]
        if manager == PNPM:
            return ["store", "prune"]
        raise InvalidInputError(f"Unknown package manager: {manager}")

    @staticmethod
    def build_list_args(manager: str, depth: int = 3, production: bool = False) -> List[str]:
        prod_flags = {NPM: "--omit=dev", YARN: "--production", PNPM: "--prod"}
        if manager not in prod_flags:
            raise InvalidInputError(f"Unknown package manager: {manager}")
        args = ["list", f"--depth={depth}"]
        if production:
            args.append(prod_flags[manager])
        return args

    # ------------------------------------------------------------------ #
    # Execution
    # ------------------------------------------------------------------ #

    async def execute(self, manager: str, args: List[str], cwd: Path) -> CommandOutput:
        """Run ``manager args...`` in ``cwd`` and capture its output."""
        logger.info("Running package manager", command=[manager, *args], cwd=str(cwd))
        try:
            process = await asyncio.create_subprocess_exec(
                manager,
                *args,
                cwd=str(cwd),
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except FileNotFoundError as e:
            raise PackageManagerError(
                f"{manager} executable not found", details={"manager": manager}
            ) from e

        try:
            stdout, stderr = await asyncio.wait_for(process.communicate(), timeout=self.timeout)
        except asyncio.TimeoutError as e:
            raise PackageManagerError(
                f"{manager} {' '.join(args)} timed out after {self.timeout:g}s",
                details={"manager": manager, "timeout_seconds": self.timeout},
            ) from e
        finally:
            # Timed out or cancelled: never leave the child running
            if process.returncode is None:
                with contextlib.suppress(ProcessLookupError):
                    process.kill()
                await process.wait()

        return CommandOutput(
            stdout=stdout.decode("utf-8", errors="replace"),
            stderr=stderr.decode("utf-8", errors="replace"),
            exit_code=process.returncode if process.returncode is not None else -1,
        )

    async def _run(
        self,
        operation: PackageOperation,
        packages: List[str],
        manager: str,
        args: List[str],
        cwd: Path,
        allow_failure: bool = False,
    ) -> PackageOperationResult:
        start = time.perf_counter()
        try:
            output = await self.execute(manager, args, cwd)
        except PackageManagerError as e:
            logger.error("Package manager failed to run", operation=operation, error=e.message)
            return PackageOperationResult(
                success=False,
                packages=packages,
                operation=operation,
                package_manager=manager,  # type: ignore[arg-type]
                output=e.message,
                errors=[e.message],
                duration_ms=int((time.perf_counter() - start) * 1000),
            )

        success = allow_failure or output.exit_code == 0
        errors = [] if success else [output.stderr.strip() or f"exit code {output.exit_code}"]
        if not success:
            logger.warning(
                "Package manager command failed",
                operation=operation,
                exit_code=output.exit_code,
                stderr=output.stderr[:1000],
            )
        return PackageOperationResult(
            success=success,
            packages=packages,
            operation=operation,
            package_manager=manager,  # type: ignore[arg-type]
            output=output.stdout or output.stderr,
            errors=errors,
            duration_ms=int((time.perf_counter() - start) * 1000),
            exit_code=output.exit_code,
        )
