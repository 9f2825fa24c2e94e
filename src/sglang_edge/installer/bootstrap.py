"""Automated installation orchestrator for sglang-edge."""

from pathlib import Path
from typing import Any, Dict, List, Optional

from sglang_edge.host import CommandRunner, SystemHost
from sglang_edge.installer import actions, checks, service, verify
from sglang_edge.installer.fetch import download_file
from sglang_edge.installer.pipeline import (
    Confirm,
    InstallContext,
    PipelineResult,
    Step,
    StepResult,
    run_pipeline,
)
from sglang_edge.log import BANNER_RULE, Logger

DOCS_URL = "https://docs.sglang.ai/"


def precondition_steps() -> List[Step]:
    return [
        Step("privileges", checks.check_privileges, kind="check"),
        Step("os_identity", checks.check_os_identity, kind="check"),
        Step("cuda_toolkit", checks.check_cuda_toolkit, kind="check"),
        Step("cuda_home", checks.configure_cuda_home, kind="check"),
    ]


def build_steps() -> List[Step]:
    """All steps of a full install; checks always come first"""
    return precondition_steps() + [
        Step("system_dependencies", actions.install_system_dependencies),
        Step("python", actions.install_python),
        Step("protoc", actions.install_protoc),
        Step("sglang", actions.install_sglang),
        Step("verify", verify.verify_installation),
        Step("service", service.create_service),
        Step("next_steps", print_next_steps, kind="report"),
    ]


def build_context(
    config: Dict[str, Any],
    confirm: Confirm,
    logger: Optional[Logger] = None,
    dry_run: bool = False,
) -> InstallContext:
    """Wire a context against the real machine"""
    logger = logger or Logger(config["logging"]["level"])
    return InstallContext(
        config=config,
        host=SystemHost(Path(config["environment"]["profile"])),
        runner=CommandRunner(logger, dry_run=dry_run),
        logger=logger,
        confirm=confirm,
        download=download_file,
    )


def print_banner(ctx: InstallContext):
    target = ctx.config["target"]
    ctx.logger.section(
        f"SGLang Setup Script for {target['os_name']} {target['os_version']} with CUDA {target['cuda_major']}"
    )


def print_next_steps(ctx: InstallContext) -> StepResult:
    svc = ctx.config["service"]
    model = svc["model_path"]
    name = svc["name"]
    launch = " ".join(service.launch_command(svc)[1:])
    out = ctx.logger

    out.plain()
    out.plain(BANNER_RULE)
    out.info("SGLang installation completed successfully!")
    out.plain(BANNER_RULE)
    out.plain()
    out.info("Quick Start Guide:")
    out.plain()
    out.plain("1. Test SGLang from command line:")
    out.plain(f"   python3 {launch}")
    out.plain()
    out.plain("2. Or use the systemd service:")
    out.plain(f"   sudo systemctl start {name}")
    out.plain(f"   sudo systemctl enable {name}  # Enable on boot")
    out.plain()
    out.plain("3. Check the server status:")
    out.plain(f"   curl http://localhost:{svc['port']}/health")
    out.plain("   or: sglang-edge verify server")
    out.plain()
    out.plain("4. Documentation:")
    out.plain(f"   {DOCS_URL}")
    out.plain()
    out.plain("5. Example usage:")
    out.plain(f"   python3 -m sglang.bench_serving --model {model}")
    out.plain()
    out.info("Note: Make sure to set your HuggingFace token for model downloads:")
    out.plain("   export HF_TOKEN=your_token_here")
    out.plain()
    out.plain(BANNER_RULE)
    return StepResult.passed()


def full_install(ctx: InstallContext) -> PipelineResult:
    """Run full installation process"""
    print_banner(ctx)
    return run_pipeline(ctx, build_steps())


def run_checks(ctx: InstallContext) -> PipelineResult:
    """Run only the precondition checks"""
    print_banner(ctx)
    return run_pipeline(ctx, precondition_steps())
