"""Precondition checks run before anything is installed.

Each check is split into a pure predicate over observed host state and a
step function that turns the observation into an outcome.
"""

import re
from dataclasses import dataclass
from typing import Dict, Optional

from sglang_edge.host import HostEnvironment
from sglang_edge.installer.pipeline import InstallContext, Outcome, StepResult

_CUDA_RELEASE = re.compile(r"release\s+([0-9]+(?:\.[0-9]+)*)")


@dataclass(frozen=True)
class OsObservation:
    name: str
    version: str
    name_ok: bool
    version_ok: bool


def evaluate_os(release: Dict[str, str], expected_name: str, expected_version: str) -> OsObservation:
    """Compare os-release NAME and VERSION_ID with the supported target"""
    name = release.get("NAME", "")
    version = release.get("VERSION_ID", "")
    return OsObservation(
        name=name,
        version=version,
        name_ok=name == expected_name,
        version_ok=version == expected_version,
    )


def parse_cuda_release(nvcc_output: str) -> Optional[str]:
    """Extract "13.0" from the "Cuda compilation tools, release 13.0, V13.0.48" line"""
    for line in nvcc_output.splitlines():
        if "release" not in line:
            continue
        match = _CUDA_RELEASE.search(line)
        if match:
            return match.group(1)
    return None


def cuda_major(version: Optional[str]) -> Optional[str]:
    if not version:
        return None
    return version.split(".", 1)[0]


def needs_env(host: HostEnvironment, name: str) -> bool:
    return not host.get(name)


def check_privileges(ctx: InstallContext) -> StepResult:
    if not ctx.host.is_root():
        return StepResult.fatal("This script requires root privileges. Please run with sudo.")
    return StepResult.passed()


def check_os_identity(ctx: InstallContext) -> StepResult:
    """Hard-fail on a foreign distribution, ask before running on another release"""
    target = ctx.config["target"]
    ctx.logger.info(f"Checking {target['os_name']} version...")

    release = ctx.host.os_release()
    if release is None:
        return StepResult.fatal("Cannot determine OS version")

    observed = evaluate_os(release, target["os_name"], target["os_version"])
    if not observed.name_ok:
        return StepResult.fatal(f"This script is designed for {target['os_name']}. Detected: {observed.name}")

    if observed.version_ok:
        return StepResult.passed(f"{observed.name} {observed.version} detected")

    ctx.logger.warn(f"This script is optimized for {target['os_name']} {target['os_version']}. Detected: {observed.version}")
    if not ctx.confirm("Continue anyway?"):
        return StepResult.fatal(f"Aborted on unsupported release {observed.name} {observed.version}")
    return StepResult.warn(f"Continuing on {observed.name} {observed.version}")


def check_cuda_toolkit(ctx: InstallContext) -> StepResult:
    """Require nvcc and nvidia-smi; a different CUDA major only warns"""
    target = ctx.config["target"]
    ctx.logger.info("Checking CUDA installation...")

    if not ctx.host.which("nvcc"):
        return StepResult.fatal(
            f"CUDA not found. Please install CUDA {target['cuda_major']}.x first.",
            details=f"Visit: {target['cuda_download_url']}",
        )

    version = parse_cuda_release(ctx.runner.probe(["nvcc", "--version"]).stdout)
    ctx.logger.info(f"CUDA version {version or 'unknown'} detected")

    mismatch = cuda_major(version) != target["cuda_major"]
    if mismatch:
        ctx.logger.warn(f"CUDA {target['cuda_major']}.x is recommended. Found CUDA {version or 'unknown'}")
        ctx.logger.info(
            f"The script will continue but CUDA {target['cuda_major']}.x is preferred for optimal compatibility"
        )
    else:
        ctx.logger.success(f"CUDA {target['cuda_major']}.x detected")

    if not ctx.host.which("nvidia-smi"):
        return StepResult.fatal("nvidia-smi not found. Please install NVIDIA drivers.")

    probe = ctx.runner.probe(["nvidia-smi", "--query-gpu=name", "--format=csv,noheader"])
    gpus = [line.strip() for line in probe.stdout.splitlines() if line.strip()]
    ctx.logger.info(f"NVIDIA GPU detected: {gpus[0] if gpus else 'unknown'}")

    if mismatch:
        return StepResult(Outcome.WARN)
    return StepResult.passed()


def configure_cuda_home(ctx: InstallContext) -> StepResult:
    """Set CUDA_HOME for this process and the operator's shell profile when unset"""
    if not needs_env(ctx.host, "CUDA_HOME"):
        return StepResult.passed()

    cuda_home = ctx.config["target"]["cuda_home"]
    if ctx.runner.dry_run:
        ctx.logger.debug(f"Would append export CUDA_HOME={cuda_home} to the shell profile")
        return StepResult.passed()

    ctx.host.set("CUDA_HOME", cuda_home)
    ctx.host.persist("CUDA_HOME", cuda_home)
    ctx.logger.info(f"CUDA_HOME set to {cuda_home}")
    return StepResult.passed()
