"""Runtime path pruning from stack traces.

A stack trace names the files that actually executed. Files outside the
execution path (plus its direct dependencies and a few importers) can be
skipped when reading for a bug.
"""

from __future__ import annotations

import posixpath
import re
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path

from readgate.collaborators.graph import DependencyGraph
from readgate.config.constants import PRUNE_IMPORTER_LIMIT
from readgate.core.paths import matches_any, normalize_path

ANONYMOUS = "<anonymous>"

# V8 "at fn (file:line:col)" or "at file:line:col"
_V8_FRAME = re.compile(r"^\s*at\s+(?:(.+?)\s+\()?(.+?):(\d+):(\d+)\)?$")
# Firefox "fn@file:line:col"
_FIREFOX_FRAME = re.compile(r"^(.*?)@(.+?):(\d+):(\d+)$")
# Python 'File "x.py", line 3, in fn'
_PYTHON_FRAME = re.compile(r'^\s*File "(.+?)", line (\d+)(?:, in (.+))?$')

_INTERNAL_MARKERS = ("node_modules", "site-packages", "dist-packages")
_INTERNAL_PREFIXES = ("node:", "internal/", "<frozen")


@dataclass(frozen=True, slots=True)
class StackFrame:
    file_path: str
    function_name: str
    line: int
    column: int | None = None
    is_internal: bool = False


@dataclass(frozen=True, slots=True)
class RuntimePath:
    frames: list[StackFrame]
    executed_files: list[str]
    executed_functions: list[str]
    relevant_files: list[str] = field(default_factory=list)
    pruned_files: list[str] = field(default_factory=list)
    call_chain: list[str] = field(default_factory=list)

    @property
    def savings(self) -> int:
        total = len(self.relevant_files) + len(self.pruned_files)
        return round(len(self.pruned_files) / total * 100) if total else 0


def _is_internal(path: str) -> bool:
    return any(m in path for m in _INTERNAL_MARKERS) or path.startswith(_INTERNAL_PREFIXES)


def _frame(function_name: str | None, path: str, line: str, column: str | None) -> StackFrame:
    return StackFrame(
        file_path=path.replace("\\", "/"),
        function_name=function_name or ANONYMOUS,
        line=int(line),
        column=int(column) if column is not None else None,
        is_internal=_is_internal(path),
    )


def parse_stack_trace(text: str) -> list[StackFrame]:
    """Parse V8, Firefox and Python frames; unrecognized lines are skipped."""
    frames: list[StackFrame] = []
    for line in text.splitlines():
        if m := _V8_FRAME.match(line):
            frames.append(_frame(m[1], m[2], m[3], m[4]))
        elif m := _PYTHON_FRAME.match(line):
            frames.append(_frame(m[3], m[1], m[2], None))
        elif m := _FIREFOX_FRAME.match(line):
            frames.append(_frame(m[1], m[2], m[3], m[4]))
    return frames


def extract_execution_path(frames: Iterable[StackFrame]) -> tuple[list[str], list[str]]:
    """(files, functions) of non-internal frames, first occurrence order."""
    files: dict[str, None] = {}
    functions: dict[str, None] = {}
    for frame in frames:
        if frame.is_internal:
            continue
        files[frame.file_path] = None
        if frame.function_name != ANONYMOUS:
            functions[f"{frame.file_path}:{frame.function_name}"] = None
    return list(files), list(functions)


def prune_irrelevant_files(
    all_files: Iterable[str],
    executed_files: Iterable[str],
    graph: DependencyGraph | None = None,
) -> tuple[list[str], list[str]]:
    """Split files into (relevant, pruned).

    Relevant files are the executed ones, their direct dependencies and up to
    three direct importers each.
    """
    relevant: dict[str, None] = {normalize_path(f): None for f in executed_files}
    if graph is not None:
        for executed in list(relevant):
            for dep in graph.get_dependencies(executed):
                relevant[normalize_path(dep)] = None
            for importer in graph.get_importers(executed)[:PRUNE_IMPORTER_LIMIT]:
                relevant[normalize_path(importer)] = None

    keep: list[str] = []
    pruned: list[str] = []
    for file_path in all_files:
        (keep if matches_any(file_path, list(relevant)) else pruned).append(file_path)
    return keep, pruned


def analyze_runtime_path(
    stack_trace: str,
    all_files: Iterable[str],
    graph: DependencyGraph | None = None,
    repo_root: Path | None = None,
) -> RuntimePath:
    frames = parse_stack_trace(stack_trace)
    if repo_root is not None:
        frames = [
            StackFrame(
                file_path=normalize_path(f.file_path, repo_root),
                function_name=f.function_name,
                line=f.line,
                column=f.column,
                is_internal=f.is_internal,
            )
            for f in frames
        ]
    files, functions = extract_execution_path(frames)
    relevant, pruned = prune_irrelevant_files(all_files, files, graph)
    # Python tracebacks list the outermost call first; V8 and Firefox list it last
    python_trace = any(_PYTHON_FRAME.match(line) for line in stack_trace.splitlines())
    ordered = frames if python_trace else list(reversed(frames))
    call_chain = [
        f"{f.function_name} ({posixpath.basename(f.file_path)}:{f.line})"
        for f in ordered
        if not f.is_internal
    ]
    return RuntimePath(
        frames=frames,
        executed_files=files,
        executed_functions=functions,
        relevant_files=relevant,
        pruned_files=pruned,
        call_chain=call_chain,
    )
