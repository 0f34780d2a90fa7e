"""Fake compiler and runtime scripts for exercising the pipeline."""

import stat
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from toolchain_e2e.config import HarnessConfig

# Accepts `-o <out> <src>`, rejects sources that are not valid Python and
# otherwise copies the source to the output path.
FAKE_COMPILER = """\
import sys

_, flag, out, src = sys.argv
assert flag == "-o", sys.argv
with open(src, encoding="utf-8") as f:
    code = f.read()
try:
    compile(code, src, "exec")
except SyntaxError as exc:
    sys.stderr.write(f"{src}:{exc.lineno}: SyntaxError: {exc.msg}\\n")
    sys.exit(1)
with open(out, "w", encoding="utf-8") as f:
    f.write(code)
"""

# Executes the artifact as Python with a `console.log` shim and records every
# artifact it was asked to run.
FAKE_RUNTIME = """\
import os
import sys

class console:
    log = staticmethod(print)

artifact = sys.argv[1]
with open(os.path.join(os.path.dirname(__file__), "runtime.log"), "a") as log:
    log.write(artifact + "\\n")
with open(artifact, encoding="utf-8") as f:
    code = f.read()
exec(compile(code, artifact, "exec"), {"console": console, "sys": sys})
"""


class WriteSourceFn(Protocol):
    """Protocol for source file creation function."""

    def __call__(self, name: str, code: str) -> str:
        """Write a source file and return its name relative to the source root."""


@dataclass(frozen=True, kw_only=True)
class FakeToolchain:
    """Paths of a fake toolchain installed into a directory."""

    compiler: Path
    runtime: Path
    artifacts: Path
    sources: Path

    @classmethod
    def install(cls, root: Path) -> "FakeToolchain":
        """Write the fake compiler and runtime below ``root``."""
        bin_dir = root / "bin"
        artifacts = root / "artifacts"
        sources = root / "sources"
        for directory in (bin_dir, artifacts, sources):
            directory.mkdir(parents=True, exist_ok=True)

        return cls(
            compiler=_install_script(bin_dir / "compiler", FAKE_COMPILER),
            runtime=_install_script(bin_dir / "runtime", FAKE_RUNTIME),
            artifacts=artifacts,
            sources=sources,
        )

    @property
    def runtime_log(self) -> Path:
        return self.runtime.parent / "runtime.log"

    def executed_artifacts(self) -> list[str]:
        """Return the artifacts the runtime was invoked with."""
        if not self.runtime_log.exists():
            return []
        return self.runtime_log.read_text().splitlines()

    def config(self, **overrides: object) -> HarnessConfig:
        """Build a harness config pointing at this toolchain."""
        options: dict[str, object] = {
            "compiler": self.compiler,
            "runtime": str(self.runtime),
            "tmp_dir": self.artifacts,
            "timeout": 30,
        }
        options.update(overrides)
        return HarnessConfig.model_validate(options)


def _install_script(path: Path, body: str) -> Path:
    path.write_text(f"#!{sys.executable}\n{body}", encoding="utf-8")
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return path
