"""Dockerfile instruction extraction."""

import posixpath
from typing import Any

from ...core.types import (
    AnalyzerGroup,
    AnalyzerType,
    ConfigFile,
    ConfigFinding,
    FileFinding,
)
from ..base import AnalysisTarget, Analyzer, decode_text


def is_dockerfile(file_path: str) -> bool:
    """Check if a path names a Dockerfile (Dockerfile, Dockerfile.*, *.Dockerfile)."""
    name = posixpath.basename(file_path)
    lowered = name.lower()
    return (
        lowered == "dockerfile"
        or lowered.startswith("dockerfile.")
        or lowered.endswith(".dockerfile")
    )


def parse_dockerfile(text: str) -> list[dict[str, Any]]:
    """Split a Dockerfile into instructions.

    Backslash continuations are joined, comments and blank lines dropped.

    Returns:
        One entry per instruction: {"cmd", "value", "startLine"}
    """
    instructions: list[dict[str, Any]] = []
    buffer: list[str] = []
    start_line = 0

    for line_no, raw in enumerate(text.splitlines(), start=1):
        line = raw.strip()
        if not buffer and (not line or line.startswith("#")):
            continue
        if buffer and line.startswith("#"):
            continue
        if not buffer:
            start_line = line_no
        if line.endswith("\\"):
            buffer.append(line[:-1].strip())
            continue
        buffer.append(line)
        statement = " ".join(part for part in buffer if part)
        buffer = []
        cmd, _, value = statement.partition(" ")
        instructions.append({"cmd": cmd.upper(), "value": value.strip(), "startLine": start_line})

    if buffer:
        statement = " ".join(part for part in buffer if part)
        cmd, _, value = statement.partition(" ")
        instructions.append({"cmd": cmd.upper(), "value": value.strip(), "startLine": start_line})
    return instructions


class DockerfileAnalyzer(Analyzer):
    """Record the instructions of Dockerfiles found in the tree."""

    type = AnalyzerType.DOCKERFILE
    group = AnalyzerGroup.CONFIG

    def matches(self, file_path: str) -> bool:
        return is_dockerfile(file_path)

    def analyze(self, target: AnalysisTarget) -> list[FileFinding]:
        instructions = parse_dockerfile(decode_text(target.content))
        if not instructions:
            return []
        return [
            ConfigFinding(
                config=ConfigFile(
                    type=str(self.type), file_path=target.file_path, content=instructions
                )
            )
        ]
