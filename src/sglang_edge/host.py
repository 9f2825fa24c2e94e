"""Host access: environment, identity probes and external commands.

Everything the installer reads from or writes to the machine goes through a
``HostEnvironment`` or a ``CommandRunner`` so that tests can swap in
in-memory fakes.
"""

import os
import platform
import shlex
import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Protocol, Sequence

from sglang_edge.errors import CommandError, HostError
from sglang_edge.log import Logger

OS_RELEASE_PATH = Path("/etc/os-release")


class HostEnvironment(Protocol):
    """Environment variables plus the read-only probes used by the checks"""

    def get(self, name: str) -> Optional[str]:
        ...

    def set(self, name: str, value: str) -> None:
        ...

    def persist(self, name: str, value: str) -> None:
        ...

    def is_root(self) -> bool:
        ...

    def os_release(self) -> Optional[Dict[str, str]]:
        ...

    def which(self, executable: str) -> Optional[str]:
        ...

    def machine(self) -> str:
        ...


def parse_os_release(text: str) -> Dict[str, str]:
    """Parse the KEY=value lines of an os-release file"""
    fields: Dict[str, str] = {}
    for line in text.splitlines():
        line = line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, _, raw = line.partition("=")
        try:
            tokens = shlex.split(raw)
        except ValueError:
            tokens = [raw]
        fields[key.strip()] = tokens[0] if tokens else ""
    return fields


class SystemHost:
    """The real machine"""

    def __init__(self, profile_path: Path, os_release_path: Path = OS_RELEASE_PATH):
        self.profile_path = Path(profile_path).expanduser()
        self.os_release_path = os_release_path

    def get(self, name: str) -> Optional[str]:
        return os.environ.get(name) or None

    def set(self, name: str, value: str) -> None:
        os.environ[name] = value

    def persist(self, name: str, value: str) -> None:
        # Appended on every call; repeated runs leave duplicate exports.
        try:
            self.profile_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.profile_path, "a") as f:
                f.write(f"export {name}={value}\n")
        except OSError as e:
            raise HostError(self.profile_path, e.strerror or str(e)) from e

    def is_root(self) -> bool:
        return os.geteuid() == 0

    def os_release(self) -> Optional[Dict[str, str]]:
        if not self.os_release_path.is_file():
            return None
        return parse_os_release(self.os_release_path.read_text())

    def which(self, executable: str) -> Optional[str]:
        return shutil.which(executable)

    def machine(self) -> str:
        return platform.machine()


@dataclass(frozen=True)
class CommandResult:
    argv: List[str]
    returncode: int
    stdout: str
    stderr: str

    @property
    def ok(self) -> bool:
        return self.returncode == 0


class CommandRunner:
    """Run external commands with consistent logging"""

    def __init__(self, logger: Logger, dry_run: bool = False):
        self.logger = logger
        self.dry_run = dry_run

    def run(
        self,
        argv: Sequence[str],
        *,
        check: bool = True,
        env: Optional[Mapping[str, str]] = None,
        cwd: Optional[Path] = None,
        quiet: bool = False,
    ) -> CommandResult:
        """Run a command and return its result.

        With ``check`` a non-zero exit raises ``CommandError``. ``quiet``
        keeps the command line out of the debug log, for probes.
        """
        argv_list = [str(a) for a in argv]
        if not quiet:
            self.logger.debug(f"Running: {shlex.join(argv_list)}")

        if self.dry_run:
            return CommandResult(argv=argv_list, returncode=0, stdout="", stderr="")

        return self._execute(argv_list, check=check, env=env, cwd=cwd, quiet=quiet)

    def probe(self, argv: Sequence[str], env: Optional[Mapping[str, str]] = None) -> CommandResult:
        """Run a read-only query; executed even in dry-run mode and never raises on exit status"""
        return self._execute([str(a) for a in argv], check=False, env=env, cwd=None, quiet=True)

    def _execute(
        self,
        argv_list: List[str],
        *,
        check: bool,
        env: Optional[Mapping[str, str]],
        cwd: Optional[Path],
        quiet: bool,
    ) -> CommandResult:
        try:
            proc = subprocess.run(
                argv_list,
                cwd=cwd,
                env=dict(os.environ, **(env or {})),
                capture_output=True,
                text=True,
                check=False,
            )
        except FileNotFoundError:
            if check:
                raise CommandError(argv_list, 127, f"{argv_list[0]}: command not found")
            return CommandResult(argv=argv_list, returncode=127, stdout="", stderr="command not found")

        if proc.stdout and not quiet:
            for line in proc.stdout.splitlines():
                if line.strip():
                    self.logger.debug(f"  {line}")

        if check and proc.returncode != 0:
            raise CommandError(argv_list, proc.returncode, proc.stderr or "")

        return CommandResult(
            argv=argv_list, returncode=proc.returncode, stdout=proc.stdout or "", stderr=proc.stderr or ""
        )
