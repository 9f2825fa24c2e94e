#!/usr/bin/env python3
"""sglang-edge CLI - Main entry point"""

from pathlib import Path

import click
import yaml
from rich.console import Console

from sglang_edge.config.manager import DEFAULT_CONFIG_PATH, ConfigManager
from sglang_edge.log import Logger

console = Console()


@click.group()
@click.option("--config", type=click.Path(dir_okay=False), help="Config file path")
@click.option("-v", "--verbose", is_flag=True, help="Verbose output")
@click.pass_context
def cli(ctx, config, verbose):
    """sglang-edge - provision an Ubuntu 24.04 / CUDA 13 host for SGLang"""
    ctx.ensure_object(dict)

    config_path = Path(config) if config else DEFAULT_CONFIG_PATH
    try:
        cfg = ConfigManager(config_path).load()
        if verbose:
            cfg["logging"]["level"] = "debug"
        logger = Logger(cfg["logging"]["level"])
    except (OSError, ValueError, yaml.YAMLError) as e:
        console.print(f"[red]Error loading config:[/red] {e}", soft_wrap=True)
        raise click.Abort()

    ctx.obj["config"] = cfg
    ctx.obj["verbose"] = verbose
    ctx.obj["logger"] = logger


@cli.command()
def version():
    """Show version information"""
    from sglang_edge import __version__

    console.print(f"sglang-edge version {__version__}")


# Import subcommands
from sglang_edge.cli import install, service, verify

cli.add_command(install.setup)
cli.add_command(install.check)
cli.add_command(service.service)
cli.add_command(verify.verify)


if __name__ == "__main__":
    cli()
