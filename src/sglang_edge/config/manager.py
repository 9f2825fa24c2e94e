"""Configuration management for sglang-edge"""

import copy
import os
from pathlib import Path
from typing import Any, Dict

import yaml

DEFAULT_CONFIG_PATH = Path("/etc/sglang-edge/config.yaml")

DEFAULTS: Dict[str, Any] = {
    "target": {
        "os_name": "Ubuntu",
        "os_version": "24.04",
        "cuda_major": "13",
        "cuda_variant": "cu130",
        "cuda_home": "/usr/local/cuda",
        "cuda_download_url": "https://developer.nvidia.com/cuda-downloads",
    },
    "python": {
        "version": "3.12",
        "ppa": "ppa:deadsnakes/ppa",
        "get_pip_url": "https://bootstrap.pypa.io/get-pip.py",
    },
    "protoc": {
        "version": "32.0",
        "prefix": "/usr/local",
    },
    "sglang": {
        "package": "sglang",
        "torch_index": "https://download.pytorch.org/whl",
    },
    "service": {
        "name": "sglang",
        "unit_dir": "/etc/systemd/system",
        "working_dir": "/opt/sglang",
        "model_path": "meta-llama/Llama-3.1-8B-Instruct",
        "host": "0.0.0.0",
        "port": 30000,
        "user": "root",
    },
    "environment": {
        "profile": "~/.bashrc",
    },
    "logging": {
        "level": "info",
    },
}


class ConfigManager:
    """Manage sglang-edge configuration"""

    def __init__(self, config_path: Path = DEFAULT_CONFIG_PATH):
        self.config_path = Path(config_path)

    def load(self) -> Dict[str, Any]:
        """Load configuration from defaults, file and environment"""
        config = self._load_defaults()

        if self.config_path.exists():
            with open(self.config_path) as f:
                file_config = yaml.safe_load(f) or {}
            if not isinstance(file_config, dict):
                raise ValueError(f"Config file must contain a mapping: {self.config_path}")
            config = self._merge(config, file_config)

        config = self._apply_env_overrides(config)

        return config

    def _load_defaults(self) -> Dict[str, Any]:
        return copy.deepcopy(DEFAULTS)

    def _merge(self, base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        """Merge two configuration dictionaries"""
        result = base.copy()

        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._merge(result[key], value)
            else:
                result[key] = value

        return result

    def _apply_env_overrides(self, config: Dict[str, Any]) -> Dict[str, Any]:
        """Apply environment variable overrides"""
        if model := os.getenv("SGLANG_EDGE_MODEL_PATH"):
            config["service"]["model_path"] = model

        if host := os.getenv("SGLANG_EDGE_HOST"):
            config["service"]["host"] = host

        if port := os.getenv("SGLANG_EDGE_PORT"):
            config["service"]["port"] = int(port)

        if level := os.getenv("SGLANG_EDGE_LOG_LEVEL"):
            config["logging"]["level"] = level.lower()

        return config
