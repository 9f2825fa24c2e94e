"""systemd unit commands"""

import click

from sglang_edge.installer.service import render_unit, service_from_config, unit_path


@click.group()
def service():
    """Inspect the SGLang systemd unit"""
    pass


@service.command()
@click.pass_context
def render(ctx):
    """Print the unit file that setup writes"""
    config = ctx.obj["config"]
    click.echo(f"# {unit_path(config)}")
    click.echo(render_unit(service_from_config(config)), nl=False)
