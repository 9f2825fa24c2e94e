"""Downloading and unpacking release archives"""

import os
import zipfile
from pathlib import Path
from typing import List, Optional

import httpx

from sglang_edge.errors import DownloadError, HostError

DOWNLOAD_TIMEOUT = 60.0


def download_file(url: str, dest: Path, transport: Optional[httpx.BaseTransport] = None) -> Path:
    """Stream ``url`` to ``dest``, following redirects"""
    dest = Path(dest)
    try:
        with httpx.Client(transport=transport, follow_redirects=True, timeout=DOWNLOAD_TIMEOUT) as client:
            with client.stream("GET", url) as response:
                response.raise_for_status()
                with open(dest, "wb") as f:
                    for chunk in response.iter_bytes():
                        f.write(chunk)
    except httpx.HTTPStatusError as e:
        raise DownloadError(url, f"HTTP {e.response.status_code}") from e
    except httpx.HTTPError as e:
        raise DownloadError(url, str(e) or type(e).__name__) from e
    return dest


def extract_zip(archive: Path, dest: Path) -> List[Path]:
    """Extract ``archive`` over ``dest`` and restore the unix permission bits"""
    extracted = []
    try:
        with zipfile.ZipFile(archive) as zf:
            for info in zf.infolist():
                target = Path(zf.extract(info, dest))
                mode = (info.external_attr >> 16) & 0o777
                if mode and not info.is_dir():
                    os.chmod(target, mode)
                extracted.append(target)
    except zipfile.BadZipFile as e:
        raise HostError(archive, f"not a zip archive ({e})") from e
    except OSError as e:
        raise HostError(e.filename or dest, e.strerror or str(e)) from e
    return extracted
