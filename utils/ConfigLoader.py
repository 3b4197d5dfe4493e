#!/usr/bin/env python3
# -*- coding: utf-8 -*-

import yaml
from pathlib import Path
from copy import deepcopy

DEFAULT_CONFIG_PATH = "etc/config.yaml"


def _merge_dicts(base: dict, override: dict) -> dict:
    """
    Shallow+nested merge: values in override win; dict values are merged recursively.
    """
    result = deepcopy(base)
    for k, v in override.items():
        if isinstance(v, dict) and isinstance(result.get(k), dict):
            result[k] = _merge_dicts(result[k], v)
        else:
            result[k] = deepcopy(v)
    return result


def _read_yaml(path: Path) -> dict:
    try:
        with open(path, "r", encoding="utf-8") as file:
            data = yaml.safe_load(file) or {}
    except FileNotFoundError:
        raise RuntimeError(f"Configuration file not found at {path}.")
    except yaml.YAMLError as e:
        raise RuntimeError(f"Error parsing YAML file: {e}")

    if not isinstance(data, dict):
        raise RuntimeError(f"Configuration file {path} must contain a mapping.")
    return data


class ConfigLoader:
    """
    Reads the YAML configuration.

    Nothing is cached here: callers load once at startup and pass the
    resolved objects (see modules.AuthConfig) into constructors.
    """

    @staticmethod
    def load_config(filepath: str = DEFAULT_CONFIG_PATH) -> dict:
        """
        Loads the configuration file and overlays an optional sibling
        ``<name>.local.yaml`` (e.g. etc/config.local.yaml) on top of it.
        """
        path = Path(filepath)
        base_cfg = _read_yaml(path)

        overlay_path = path.with_name(f"{path.stem}.local{path.suffix}")
        if overlay_path.is_file():
            base_cfg = _merge_dicts(base_cfg, _read_yaml(overlay_path))

        return base_cfg

    @staticmethod
    def load_from_string(text: str, overrides: dict | None = None) -> dict:
        """Parse configuration from a YAML string, mostly for tools and tests."""
        try:
            data = yaml.safe_load(text) or {}
        except yaml.YAMLError as e:
            raise RuntimeError(f"Error parsing YAML file: {e}")
        if not isinstance(data, dict):
            raise RuntimeError("Configuration must contain a mapping.")
        if overrides:
            data = _merge_dicts(data, overrides)
        return data
