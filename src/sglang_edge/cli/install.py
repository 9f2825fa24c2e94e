"""Installation commands"""

import click

from sglang_edge.installer import bootstrap


def confirm_on_stdin(prompt: str) -> bool:
    """Ask a yes/no question; a closed stdin counts as "no".

    click reports both EOF and Ctrl-C as ``Abort``; the interrupt is re-raised
    so the run still exits 130.
    """
    try:
        return click.confirm(prompt, default=False)
    except click.Abort as e:
        if isinstance(e.__context__, KeyboardInterrupt):
            raise KeyboardInterrupt from None
        return False


def _run(ctx, pipeline, dry_run: bool = False):
    config = ctx.obj["config"]
    logger = ctx.obj["logger"]
    install_ctx = bootstrap.build_context(config, confirm=confirm_on_stdin, logger=logger, dry_run=dry_run)

    try:
        result = pipeline(install_ctx)
    except KeyboardInterrupt:
        logger.error("Interrupted; the host is left as the completed steps made it")
        ctx.exit(130)

    if not result.ok:
        logger.error(f"Installation failed at: {result.failed_step}")
    ctx.exit(result.exit_code)


@click.command()
@click.option("--dry-run", is_flag=True, help="Log the commands without changing the host")
@click.pass_context
def setup(ctx, dry_run):
    """Run the full provisioning pipeline"""
    _run(ctx, bootstrap.full_install, dry_run=dry_run)


@click.command()
@click.pass_context
def check(ctx):
    """Run the precondition checks only"""
    _run(ctx, bootstrap.run_checks)
