"""Loading of suite definitions from cases.yaml files."""

import asyncio
import logging
from pathlib import Path

import yaml

from toolchain_e2e.models.definition import SuiteDefinition

log = logging.getLogger(__name__)

SUITE_FILENAME = "cases.yaml"


def resolve_suite_path(path: Path) -> Path:
    """Return ``path`` itself, or the suite file inside it for a directory."""
    return path / SUITE_FILENAME if path.is_dir() else path


async def load_suite_definition(path: Path) -> SuiteDefinition:
    """Load and validate a suite definition.

    Args:
        path: Suite file, or a directory containing cases.yaml

    Returns:
        Parsed suite definition

    Raises:
        FileNotFoundError: If the suite file does not exist
        OSError: If the suite file cannot be read
        UnicodeDecodeError: If the suite file is not valid UTF-8
        yaml.YAMLError: If the file is not valid YAML
        pydantic.ValidationError: If the content does not match the schema

    """
    suite_path = resolve_suite_path(path)
    content = await asyncio.to_thread(suite_path.read_text, encoding="utf-8")
    data = yaml.safe_load(content)

    suite = SuiteDefinition.model_validate(data)
    log.debug("Loaded %d case(s) from %s", len(suite.cases), suite_path)
    return suite
