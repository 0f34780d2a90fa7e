"""Models for suite definitions loaded from cases.yaml files."""

from collections import Counter
from collections.abc import Sequence

from pydantic import Field, model_validator

from toolchain_e2e.models.base import Model


class CaseDefinition(Model):
    """A single compile-then-run test case."""

    name: str = Field(..., min_length=1, description="Unique test name")
    source: str = Field(
        ..., description="Source file, relative to the suite file directory"
    )
    stdin: str = Field(default="", description="Text written to the program input")
    expected_output: str = Field(
        ..., description="Exact text the program must write to stdout"
    )


class SuiteDefinition(Model):
    """Complete suite definition loaded from cases.yaml."""

    version: str = Field(..., description="Suite definition schema version")
    cases: Sequence[CaseDefinition] = Field(
        default_factory=list, description="Test cases in registration order"
    )

    @model_validator(mode="after")
    def check_unique_names(self) -> "SuiteDefinition":
        """Reject suites that register the same name twice."""
        counts = Counter(case.name for case in self.cases)
        duplicates = sorted(name for name, count in counts.items() if count > 1)
        if duplicates:
            raise ValueError(f"Duplicate case names: {', '.join(duplicates)}")
        return self
