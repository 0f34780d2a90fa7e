"""Configuration for a harness run."""

import tempfile
from pathlib import Path
from typing import Annotated

from pydantic import Field

from toolchain_e2e.models.base import Model

DEFAULT_TIMEOUT = 60.0


class HarnessConfig(Model):
    """Locations of the toolchain binaries and per-test execution limits."""

    compiler: Path = Field(..., description="Path to the compiler executable")
    runtime: str = Field(
        default="wasmtime", description="Runtime executable name or path"
    )
    tmp_dir: Path = Field(
        default_factory=lambda: Path(tempfile.gettempdir()),
        description="Directory where compiled artifacts are written",
    )
    artifact_suffix: str = Field(
        default=".wasm", description="File suffix of compiled artifacts"
    )
    timeout: Annotated[float, Field(gt=0)] | None = Field(
        default=DEFAULT_TIMEOUT,
        description="Per-test deadline in seconds (None disables it)",
    )
    max_concurrency: Annotated[int, Field(ge=1)] | None = Field(
        default=None,
        description="Maximum number of tests running at once (None is unbounded)",
    )
