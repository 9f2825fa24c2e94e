"""Shared fixtures: in-memory host, recording runner, quiet logger"""

import io
import stat
import zipfile
from pathlib import Path
from typing import Dict, List, Optional

import pytest
from rich.console import Console

from sglang_edge.config.manager import ConfigManager
from sglang_edge.errors import CommandError
from sglang_edge.host import CommandResult
from sglang_edge.installer.pipeline import InstallContext
from sglang_edge.log import Logger

UBUNTU_2404 = {"NAME": "Ubuntu", "VERSION_ID": "24.04", "ID": "ubuntu"}

NVCC_13 = """nvcc: NVIDIA (R) Cuda compiler driver
Copyright (c) 2005-2025 NVIDIA Corporation
Cuda compilation tools, release 13.0, V13.0.48
Build cuda_13.0.r13.0/compiler.36260728_0
"""


class FakeHost:
    """HostEnvironment backed by dicts"""

    def __init__(
        self,
        root: bool = True,
        release: Optional[Dict[str, str]] = None,
        executables=("nvcc", "nvidia-smi", "pip3"),
        machine: str = "x86_64",
        env: Optional[Dict[str, str]] = None,
    ):
        self.root = root
        self.release = dict(UBUNTU_2404) if release is None else release
        self.executables = set(executables)
        self.arch = machine
        self.env = dict(env or {})
        self.profile: List[str] = []

    def get(self, name):
        return self.env.get(name) or None

    def set(self, name, value):
        self.env[name] = value

    def persist(self, name, value):
        self.profile.append(f"export {name}={value}")

    def is_root(self):
        return self.root

    def os_release(self):
        return self.release

    def which(self, executable):
        return f"/usr/bin/{executable}" if executable in self.executables else None

    def machine(self):
        return self.arch


class FakeRunner:
    """Records every command; answers probes from a table"""

    def __init__(self, dry_run: bool = False):
        self.dry_run = dry_run
        self.calls: List[List[str]] = []
        self.envs: List[Optional[dict]] = []
        self.probes: List[List[str]] = []
        self.outputs: Dict[tuple, CommandResult] = {}
        self.failing: set = set()

    def respond(self, argv, stdout="", returncode=0):
        self.outputs[tuple(argv)] = CommandResult(list(argv), returncode, stdout, "")

    def fail(self, *prefix):
        self.failing.add(tuple(prefix))

    def _lookup(self, argv):
        return self.outputs.get(tuple(argv), CommandResult(list(argv), 0, "", ""))

    def run(self, argv, *, check=True, env=None, cwd=None, quiet=False):
        argv = [str(a) for a in argv]
        self.calls.append(argv)
        self.envs.append(env)
        for prefix in self.failing:
            if tuple(argv[: len(prefix)]) == prefix:
                if check:
                    raise CommandError(argv, 100, "E: simulated failure")
                return CommandResult(argv, 100, "", "E: simulated failure")
        return self._lookup(argv)

    def probe(self, argv, env=None):
        argv = [str(a) for a in argv]
        self.probes.append(argv)
        return self._lookup(argv)

    def programs(self) -> List[str]:
        return [argv[0] for argv in self.calls]


class ScriptedConfirm:
    def __init__(self, answer: bool):
        self.answer = answer
        self.prompts: List[str] = []

    def __call__(self, prompt):
        self.prompts.append(prompt)
        return self.answer


def write_protoc_zip(dest: Path) -> Path:
    """A miniature protoc release: an executable and one include file"""
    with zipfile.ZipFile(dest, "w") as zf:
        binary = zipfile.ZipInfo("bin/protoc")
        binary.external_attr = (stat.S_IFREG | 0o755) << 16
        zf.writestr(binary, "#!/bin/sh\necho libprotoc 32.0\n")
        zf.writestr("include/google/protobuf/empty.proto", 'syntax = "proto3";\n')
    return dest


class FakeDownloader:
    """Serves a protoc-shaped archive for every URL"""

    def __init__(self):
        self.urls: List[str] = []

    def __call__(self, url, dest):
        self.urls.append(url)
        return write_protoc_zip(Path(dest))


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep SGLANG_EDGE_* overrides from the developer shell out of every test"""
    for name in ("SGLANG_EDGE_MODEL_PATH", "SGLANG_EDGE_HOST", "SGLANG_EDGE_PORT", "SGLANG_EDGE_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def config(tmp_path):
    cfg = ConfigManager(tmp_path / "missing.yaml").load()
    cfg["service"]["unit_dir"] = str(tmp_path / "systemd")
    cfg["service"]["working_dir"] = str(tmp_path / "opt" / "sglang")
    cfg["protoc"]["prefix"] = str(tmp_path / "usr-local")
    return cfg


@pytest.fixture
def output():
    return io.StringIO()


@pytest.fixture
def logger(output):
    return Logger("debug", console=Console(file=output, width=200, highlight=False))


@pytest.fixture
def host():
    return FakeHost()


@pytest.fixture
def runner():
    r = FakeRunner()
    r.respond(["nvcc", "--version"], NVCC_13)
    r.respond(["nvidia-smi", "--query-gpu=name", "--format=csv,noheader"], "NVIDIA H100 80GB HBM3\n")
    r.respond(["python3", "-c", "import sglang; print(sglang.__version__)"], "0.5.3\n")
    return r


@pytest.fixture
def confirm():
    return ScriptedConfirm(True)


@pytest.fixture
def downloader():
    return FakeDownloader()


@pytest.fixture
def make_ctx(config, host, runner, logger, confirm, downloader):
    def _make(**overrides):
        fields = dict(
            config=config,
            host=host,
            runner=runner,
            logger=logger,
            confirm=confirm,
            download=downloader,
        )
        fields.update(overrides)
        return InstallContext(**fields)

    return _make
