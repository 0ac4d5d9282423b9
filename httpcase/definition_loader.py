"""Load request suites from YAML files."""

import asyncio
import logging
from pathlib import Path

import yaml
from pydantic import ValidationError

from httpcase.models.definition import SuiteDefinition

log = logging.getLogger(__name__)


class SuiteDefinitionError(Exception):
    """Raised when a suite file cannot be parsed or validated."""

    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(f"Invalid suite definition {path}: {reason}")
        self.path = path


async def load_suite_definition(path: Path) -> SuiteDefinition:
    """Load and validate a suite definition.

    Args:
        path: Path to the YAML suite file

    Returns:
        The validated suite definition

    Raises:
        FileNotFoundError: If the file does not exist
        SuiteDefinitionError: If the file is not valid YAML or fails validation

    """
    content = await asyncio.to_thread(path.read_text, encoding="utf-8")
    log.debug("Loaded suite file %s (%d bytes)", path, len(content))

    try:
        data = yaml.safe_load(content)
    except yaml.YAMLError as exc:
        raise SuiteDefinitionError(path, str(exc)) from exc

    try:
        return SuiteDefinition.model_validate(data)
    except ValidationError as exc:
        raise SuiteDefinitionError(path, str(exc)) from exc
