"""Installation orchestrator for sglang-edge."""

from .bootstrap import build_context, build_steps, full_install, run_checks
from .pipeline import InstallContext, Outcome, PipelineResult, Step, StepResult, run_pipeline

__all__ = [
    "build_context",
    "build_steps",
    "full_install",
    "run_checks",
    "InstallContext",
    "Outcome",
    "PipelineResult",
    "Step",
    "StepResult",
    "run_pipeline",
]
