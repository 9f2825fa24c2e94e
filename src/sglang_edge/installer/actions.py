"""Installation actions, in the order the pipeline runs them.

Every action shells out through the context's runner with ``check=True``; a
failing command raises and the pipeline aborts at that step.
"""

import tempfile
from pathlib import Path
from typing import List

from sglang_edge.installer.fetch import extract_zip
from sglang_edge.installer.pipeline import InstallContext, StepResult

SYSTEM_PACKAGES = [
    "build-essential",
    "cmake",
    "git",
    "wget",
    "curl",
    "software-properties-common",
    "pkg-config",
    "libssl-dev",
    "libnuma-dev",
    "unzip",
    "gcc",
    "g++",
    "perl",
    "make",
]

PROTOC_RELEASE_URL = (
    "https://github.com/protocolbuffers/protobuf/releases/download/v{version}/protoc-{version}-linux-{arch}.zip"
)

ARM64_MACHINES = ("aarch64", "arm64")


def protoc_arch(machine: str) -> str:
    """Map ``uname -m`` onto a protoc release token; anything unrecognized is x86_64"""
    if machine in ARM64_MACHINES:
        return "aarch_64"
    return "x86_64"


def protoc_url(version: str, arch: str) -> str:
    return PROTOC_RELEASE_URL.format(version=version, arch=arch)


def python_packages(version: str) -> List[str]:
    base = f"python{version}"
    return [base, f"{base}-full", f"{base}-dev", f"{base}-venv"]


def apt_install(ctx: InstallContext, packages: List[str]):
    ctx.runner.run(["apt-get", "install", "-y", "-qq", *packages])


def install_system_dependencies(ctx: InstallContext) -> StepResult:
    ctx.logger.info("Installing system dependencies...")
    ctx.runner.run(["apt-get", "update", "-qq"])
    apt_install(ctx, SYSTEM_PACKAGES)
    return StepResult.passed("System dependencies installed")


def install_python(ctx: InstallContext) -> StepResult:
    """Install the interpreter from the PPA and make it the default python3"""
    cfg = ctx.config["python"]
    version = cfg["version"]
    interpreter = f"/usr/bin/python{version}"
    ctx.logger.info(f"Installing Python {version}...")

    ctx.runner.run(["add-apt-repository", "-y", cfg["ppa"]])
    ctx.runner.run(["apt-get", "update", "-qq"])
    apt_install(ctx, python_packages(version))

    ctx.runner.run(["update-alternatives", "--install", "/usr/bin/python3", "python3", interpreter, "2"])
    ctx.runner.run(["update-alternatives", "--set", "python3", interpreter])

    if not ctx.host.which("pip3"):
        ctx.logger.info("pip3 not found, bootstrapping pip...")
        if ctx.runner.dry_run:
            ctx.logger.debug(f"Would download {cfg['get_pip_url']}")
        else:
            with tempfile.TemporaryDirectory() as tmp:
                script = ctx.download(cfg["get_pip_url"], Path(tmp) / "get-pip.py")
                ctx.runner.run(["python3", str(script)])

    reported = ctx.runner.run(["python3", "--version"]).stdout.strip()
    if reported:
        ctx.logger.info(reported)
    return StepResult.passed(f"Python {version} installed")


def install_protoc(ctx: InstallContext) -> StepResult:
    """Fetch the pinned protoc release for this CPU unless one is already on PATH"""
    cfg = ctx.config["protoc"]
    ctx.logger.info("Installing Protocol Buffers compiler...")

    if ctx.host.which("protoc"):
        message = "protoc already installed"
    else:
        url = protoc_url(cfg["version"], protoc_arch(ctx.host.machine()))
        if ctx.runner.dry_run:
            ctx.logger.debug(f"Would download {url}")
        else:
            with tempfile.TemporaryDirectory() as tmp:
                archive = ctx.download(url, Path(tmp) / url.rsplit("/", 1)[-1])
                extract_zip(archive, Path(cfg["prefix"]))
        message = "protoc installed"

    reported = ctx.runner.run(["protoc", "--version"]).stdout.strip()
    if reported:
        ctx.logger.info(reported)
    return StepResult.passed(message)


def install_sglang(ctx: InstallContext) -> StepResult:
    """Install sglang with uv against the CUDA-specific PyTorch wheel index"""
    cfg = ctx.config["sglang"]
    variant = ctx.config["target"]["cuda_variant"]
    ctx.logger.info("Installing SGLang...")

    ctx.runner.run(["pip3", "install", "--upgrade", "pip", "-q"])

    ctx.logger.info("Installing uv package manager...")
    ctx.runner.run(["pip3", "install", "uv", "-q"])

    ctx.logger.info(f"Installing SGLang with {variant} support (this may take several minutes)...")
    ctx.runner.run(
        [
            "uv",
            "pip",
            "install",
            cfg["package"],
            "--extra-index-url",
            f"{cfg['torch_index'].rstrip('/')}/{variant}",
            "--prerelease=allow",
            "--index-strategy",
            "unsafe-best-match",
        ],
        env={"UV_SYSTEM_PYTHON": "true"},
    )
    return StepResult.passed("SGLang installed")
