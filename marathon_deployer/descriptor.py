"""
Marathon app descriptor loading.
"""

import json
import logging
from pathlib import Path
from typing import Union

import yaml
from pydantic import ValidationError

from marathon_deployer.exceptions import DescriptorLoadError
from marathon_deployer.models import AppSpec

logger = logging.getLogger(__name__)

YAML_SUFFIXES = (".yml", ".yaml")


def load_app_spec(path: Union[str, Path]) -> AppSpec:
    """
    Load an app descriptor from disk.

    JSON is the native Marathon format; .yml/.yaml files are parsed with PyYAML.

    Args:
        path: Path to the descriptor file

    Returns:
        The parsed AppSpec

    Raises:
        DescriptorLoadError: File missing, unreadable, malformed, or without an id
    """
    descriptor_path = Path(path)
    if not descriptor_path.is_file():
        raise DescriptorLoadError(
            str(path), FileNotFoundError(f"App descriptor not found: {descriptor_path}")
        )

    try:
        with open(descriptor_path, "r", encoding="utf-8") as f:
            if descriptor_path.suffix.lower() in YAML_SUFFIXES:
                data = yaml.safe_load(f)
            else:
                data = json.load(f)
    except (OSError, ValueError, yaml.YAMLError) as e:
        raise DescriptorLoadError(str(path), e) from e

    if not isinstance(data, dict):
        raise DescriptorLoadError(
            str(path), ValueError("App descriptor must be a JSON/YAML object")
        )

    try:
        spec = AppSpec.from_descriptor(data)
    except ValidationError as e:
        raise DescriptorLoadError(str(path), e) from e

    logger.debug(f"Loaded app descriptor {descriptor_path} for {spec.id}")
    return spec
