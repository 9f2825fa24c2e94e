"""Post-install verification"""

from typing import Optional

from sglang_edge.installer.pipeline import InstallContext, StepResult

UNKNOWN_VERSION = "unknown"

TORCH_SUMMARY = (
    "import torch; "
    "print(f'PyTorch version: {torch.__version__}'); "
    "print(f'CUDA available: {torch.cuda.is_available()}'); "
    "print(f'CUDA version: {torch.version.cuda if torch.cuda.is_available() else \"N/A\"}')"
)

TORCH_CUDA_AVAILABLE = "import torch; exit(0 if torch.cuda.is_available() else 1)"


def package_version(ctx: InstallContext, module: str) -> str:
    """Report ``module.__version__``, or "unknown" if it cannot be read"""
    probe = ctx.runner.probe(["python3", "-c", f"import {module}; print({module}.__version__)"])
    version: Optional[str] = probe.stdout.strip() if probe.ok else None
    return version or UNKNOWN_VERSION


def verify_installation(ctx: InstallContext) -> StepResult:
    """The package must import; a missing GPU only warns"""
    module = ctx.config["sglang"]["package"]
    ctx.logger.info("Verifying SGLang installation...")

    if ctx.runner.dry_run:
        ctx.logger.debug(f"Would verify that {module} imports")
        return StepResult.passed()

    if not ctx.runner.probe(["python3", "-c", f"import {module}"]).ok:
        return StepResult.fatal("SGLang installation verification failed")
    ctx.logger.success("SGLang import successful")
    ctx.logger.info(f"SGLang version: {package_version(ctx, module)}")

    ctx.logger.info("Verifying PyTorch CUDA support...")
    summary = ctx.runner.probe(["python3", "-c", TORCH_SUMMARY])
    for line in summary.stdout.splitlines():
        if line.strip():
            ctx.logger.plain(line)

    if not ctx.runner.probe(["python3", "-c", TORCH_CUDA_AVAILABLE]).ok:
        return StepResult.warn("PyTorch CUDA support not detected. Please check your CUDA installation.")
    return StepResult.passed("PyTorch CUDA support verified")
