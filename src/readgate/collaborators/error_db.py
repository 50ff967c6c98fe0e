"""Read-only view of the error-pattern database (``.rag/errors.json``)."""

from __future__ import annotations

import posixpath
from pathlib import Path

from pydantic import ConfigDict, Field

from readgate.core.paths import ERRORS_FILE, normalize_path
from readgate.state.store import StateDocument, StateModel, load_document


class ErrorSolution(StateModel):
    model_config = ConfigDict(extra="ignore")

    description: str = ""
    steps: list[str] = Field(default_factory=list)


class ErrorMetadata(StateModel):
    model_config = ConfigDict(extra="ignore")

    tags: list[str] = Field(default_factory=list)
    severity: str = "medium"


class ErrorPattern(StateModel):
    model_config = ConfigDict(extra="ignore")

    id: str = ""
    error_type: str = ""
    error_message: str = ""
    solution: ErrorSolution = Field(default_factory=ErrorSolution)
    metadata: ErrorMetadata = Field(default_factory=ErrorMetadata)

    def mentions(self, basename: str) -> bool:
        return (
            basename in self.error_message
            or basename in self.solution.description
            or basename in self.metadata.tags
        )


class ErrorPatternDB(StateDocument):
    model_config = ConfigDict(extra="ignore")

    patterns: list[ErrorPattern] = Field(default_factory=list)

    def count_mentions(self, path: str) -> int:
        """Number of stored patterns that mention the file's basename."""
        basename = posixpath.basename(normalize_path(path))
        if not basename:
            return 0
        return sum(1 for p in self.patterns if p.mentions(basename))


def load_error_db(state_dir: Path) -> ErrorPatternDB | None:
    return load_document(state_dir / ERRORS_FILE, ErrorPatternDB)
