"""Verification commands"""

import click
import httpx
from rich.console import Console

from sglang_edge.installer import bootstrap
from sglang_edge.installer.pipeline import Step, run_pipeline
from sglang_edge.installer.verify import verify_installation

console = Console()

HEALTH_TIMEOUT = 5.0


def health_url(service: dict) -> str:
    host = service["host"]
    if host in ("0.0.0.0", "::", ""):
        host = "localhost"
    return f"http://{host}:{service['port']}/health"


@click.group()
def verify():
    """Verify the installation and the running server"""
    pass


@verify.command()
@click.pass_context
def install(ctx):
    """Check that sglang imports and that PyTorch sees a GPU"""
    install_ctx = bootstrap.build_context(
        ctx.obj["config"], confirm=lambda prompt: False, logger=ctx.obj["logger"]
    )
    result = run_pipeline(install_ctx, [Step("verify", verify_installation)])
    ctx.exit(result.exit_code)


@verify.command()
@click.option("--url", default=None, help="Health endpoint (default: from config)")
@click.pass_context
def server(ctx, url):
    """Check that the SGLang server answers on /health"""
    url = url or health_url(ctx.obj["config"]["service"])

    try:
        response = httpx.get(url, timeout=HEALTH_TIMEOUT)
    except httpx.HTTPError as e:
        console.print(f"[red]✗[/red] SGLang server not reachable at {url}: {e}", soft_wrap=True)
        ctx.exit(1)

    if response.status_code == 200:
        console.print(f"[green]✓[/green] SGLang server is healthy ({url})", soft_wrap=True)
    else:
        console.print(f"[red]✗[/red] SGLang server returned HTTP {response.status_code} ({url})", soft_wrap=True)
        ctx.exit(1)
