"""systemd unit for the SGLang server"""

import shlex
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List

from sglang_edge.errors import HostError
from sglang_edge.installer.pipeline import InstallContext, StepResult

SYSTEM_PATH = "/usr/local/sbin:/usr/local/bin:/usr/sbin:/usr/bin:/sbin:/bin"


@dataclass(frozen=True)
class ServiceDefinition:
    description: str
    working_directory: str
    exec_start: List[str]
    user: str = "root"
    after: str = "network.target"
    environment: Dict[str, str] = field(default_factory=dict)
    restart: str = "on-failure"
    restart_sec: int = 10
    wanted_by: str = "multi-user.target"


def launch_command(service: Dict[str, Any]) -> List[str]:
    return [
        "/usr/bin/python3",
        "-m",
        "sglang.launch_server",
        "--model-path",
        service["model_path"],
        "--host",
        service["host"],
        "--port",
        str(service["port"]),
    ]


def service_from_config(config: Dict[str, Any]) -> ServiceDefinition:
    service = config["service"]
    cuda_home = config["target"]["cuda_home"]
    return ServiceDefinition(
        description="SGLang Server",
        working_directory=service["working_dir"],
        exec_start=launch_command(service),
        user=service["user"],
        environment={
            "CUDA_HOME": cuda_home,
            "PATH": f"{cuda_home}/bin:{SYSTEM_PATH}",
        },
    )


def unit_path(config: Dict[str, Any]) -> Path:
    service = config["service"]
    return Path(service["unit_dir"]) / f"{service['name']}.service"


def render_unit(definition: ServiceDefinition) -> str:
    """Render the unit file; identical definitions give identical text"""
    lines = [
        "[Unit]",
        f"Description={definition.description}",
        f"After={definition.after}",
        "",
        "[Service]",
        "Type=simple",
        f"User={definition.user}",
        f"WorkingDirectory={definition.working_directory}",
    ]
    lines += [f'Environment="{key}={value}"' for key, value in definition.environment.items()]
    lines += [
        f"ExecStart={shlex.join(definition.exec_start)}",
        f"Restart={definition.restart}",
        f"RestartSec={definition.restart_sec}",
        "",
        "[Install]",
        f"WantedBy={definition.wanted_by}",
    ]
    return "\n".join(lines) + "\n"


def write_unit(definition: ServiceDefinition, path: Path) -> Path:
    """Overwrite ``path`` with the rendered unit and create the working directory"""
    try:
        Path(definition.working_directory).mkdir(parents=True, exist_ok=True)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(render_unit(definition))
    except OSError as e:
        raise HostError(e.filename or path, e.strerror or str(e)) from e
    return path


def create_service(ctx: InstallContext) -> StepResult:
    ctx.logger.info("Creating SGLang systemd service...")
    definition = service_from_config(ctx.config)
    path = unit_path(ctx.config)

    if ctx.runner.dry_run:
        ctx.logger.debug(f"Would write {path}")
    else:
        write_unit(definition, path)
    ctx.runner.run(["systemctl", "daemon-reload"])

    name = ctx.config["service"]["name"]
    ctx.logger.success("SGLang systemd service created")
    ctx.logger.info(f"Service file: {path}")
    ctx.logger.info("")
    ctx.logger.info("To start the service:")
    ctx.logger.info(f"  sudo systemctl start {name}")
    ctx.logger.info("")
    ctx.logger.info("To enable on boot:")
    ctx.logger.info(f"  sudo systemctl enable {name}")
    ctx.logger.info("")
    ctx.logger.info("To check status:")
    ctx.logger.info(f"  sudo systemctl status {name}")
    return StepResult.passed()
