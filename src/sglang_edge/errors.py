"""Installer exceptions"""

import shlex
from typing import Sequence


class InstallerError(Exception):
    """Base exception for provisioning failures"""

    pass


class CommandError(InstallerError):
    """An external command exited non-zero or could not be started"""

    def __init__(self, argv: Sequence[str], returncode: int, stderr: str = ""):
        self.argv = list(argv)
        self.returncode = returncode
        self.stderr = stderr
        message = f"Command failed ({returncode}): {shlex.join(self.argv)}"
        if stderr.strip():
            message += f"\n{stderr.strip()}"
        super().__init__(message)


class DownloadError(InstallerError):
    """A remote artifact could not be fetched"""

    def __init__(self, url: str, reason: str):
        self.url = url
        self.reason = reason
        super().__init__(f"Download failed: {url} ({reason})")


class HostError(InstallerError):
    """A file on the host could not be written or unpacked"""

    def __init__(self, path, reason: str):
        self.path = str(path)
        self.reason = reason
        super().__init__(f"Cannot write {self.path}: {reason}")
