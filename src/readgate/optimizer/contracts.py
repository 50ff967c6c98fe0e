"""API contract snapshots.

A file's contract is the ordered list of its exported signatures, extracted
line by line with per-language rule tables. The contract hash only changes
when a signature is added, removed, renamed or reshaped; body edits and
unrelated code motion leave it alone.
"""

from __future__ import annotations

import hashlib
import re
from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass
from pathlib import Path

from readgate.collaborators.graph import DependencyGraph
from readgate.core.logging import get_logger
from readgate.core.paths import CONTRACTS_FILE, RAG_DIR_NAME, normalize_path
from readgate.optimizer.models import (
    ContractDiff,
    ContractDocument,
    FileContract,
    SignatureInfo,
    SignatureKind,
)
from readgate.state.store import load_document, utc_now, write_document

log = get_logger("contracts")


@dataclass(frozen=True, slots=True)
class SignatureRule:
    """One signature pattern: what it matches and how its text is rendered."""

    kind: SignatureKind
    pattern: re.Pattern[str]
    render: Callable[[re.Match[str], str], str]


def _strip_body(_match: re.Match[str], line: str) -> str:
    return re.sub(r"\s*\{.*$", "", line)


def _whole_line(_match: re.Match[str], line: str) -> str:
    return line


def _squash(text: str | None) -> str:
    return " ".join((text or "").split())


def _js_function(m: re.Match[str], _line: str) -> str:
    ret = f": {m[4].strip()}" if m[4] else ""
    return f"function {m[1]}{m[2] or ''}({m[3]}){ret}"


def _js_const(m: re.Match[str], _line: str) -> str:
    annotation = f": {m[2].strip()}" if m[2] else ""
    return f"const {m[1]}{annotation}"


def _py_def(m: re.Match[str], _line: str) -> str:
    args = _squash(m[3]).rstrip(",").strip()
    ret = f" -> {_squash(m[4])}" if m[4] else ""
    return f"def {m[1]}{m[2] or ''}({args}){ret}"


def _py_class(m: re.Match[str], _line: str) -> str:
    bases = f"({_squash(m[3]).rstrip(',').strip()})" if m[3] is not None else ""
    return f"class {m[1]}{m[2] or ''}{bases}"


def _py_const(m: re.Match[str], _line: str) -> str:
    annotation = f": {_squash(m[2])}" if m[2] else ""
    return f"{m[1]}{annotation}"


def _py_type(_match: re.Match[str], line: str) -> str:
    return _squash(line)


JS_SIGNATURE_RULES: tuple[SignatureRule, ...] = (
    SignatureRule(
        "function",
        re.compile(
            r"^export\s+(?:async\s+)?function\s+(\w+)\s*(<[^>]+>)?\s*\(([^)]*)\)\s*(?::\s*([^{]+))?"
        ),
        _js_function,
    ),
    SignatureRule("const", re.compile(r"^export\s+const\s+(\w+)\s*(?::\s*([^=]+))?\s*="), _js_const),
    SignatureRule(
        "class",
        re.compile(
            r"^export\s+(?:abstract\s+)?class\s+(\w+)"
            r"(?:\s+extends\s+\w+)?(?:\s+implements\s+[\w,\s]+)?"
        ),
        _strip_body,
    ),
    SignatureRule(
        "interface", re.compile(r"^export\s+interface\s+(\w+)(?:<[^>]+>)?"), _strip_body
    ),
    SignatureRule("type", re.compile(r"^export\s+type\s+(\w+)(?:<[^>]+>)?\s*="), _whole_line),
)

_PY_DEF = re.compile(
    r"^(?:async\s+)?def\s+([A-Za-z]\w*)\s*(\[[^\]]*\])?\s*\((.*)\)\s*(?:->\s*([^:]+?))?\s*:"
)

PY_SIGNATURE_RULES: tuple[SignatureRule, ...] = (
    SignatureRule("function", _PY_DEF, _py_def),
    SignatureRule(
        "class",
        re.compile(r"^class\s+([A-Za-z]\w*)\s*(\[[^\]]*\])?\s*(?:\((.*)\))?\s*:"),
        _py_class,
    ),
    SignatureRule("type", re.compile(r"^type\s+([A-Za-z]\w*)\b.*="), _py_type),
    SignatureRule(
        "const",
        re.compile(r"^([A-Z][A-Z0-9_]*)\s*(?::\s*([^=]+?))?\s*="),
        _py_const,
    ),
)

_PY_SUFFIXES = {".py", ".pyi"}

# String delimiters, longest first; only the multi-line ones carry across lines
_PY_QUOTES = ('"""', "'''", '"', "'")
_PY_MULTILINE = {'"""', "'''"}
_JS_QUOTES = ("`", '"', "'")
_JS_MULTILINE = {"`"}

_JS_METHOD = re.compile(
    r"^(?:(?:public|private|protected|static|async|get|set)\s+)*"
    r"(\w+)\s*\(([^)]*)\)\s*(?::\s*([^{]+))?\{"
)
_JS_NOT_METHODS = {"if", "for", "while", "switch", "catch", "return", "function", "with"}


def rules_for(path: str) -> tuple[SignatureRule, ...]:
    """Rule table for a file, chosen by extension (JS/TS family by default)."""
    return PY_SIGNATURE_RULES if Path(path).suffix in _PY_SUFFIXES else JS_SIGNATURE_RULES


def _code_only(
    line: str,
    open_quote: str | None,
    quotes: tuple[str, ...],
    multiline: set[str],
    comment: str,
) -> tuple[str, str | None]:
    """The parts of a line outside string literals and comments.

    Returns the code text and the string delimiter still open at the end of
    the line (only multi-line delimiters carry over).
    """
    code: list[str] = []
    quote = open_quote
    i = 0
    while i < len(line):
        if quote is not None:
            if line[i] == "\\":
                i += 2
            elif line.startswith(quote, i):
                i += len(quote)
                quote = None
            else:
                i += 1
            continue
        if line.startswith(comment, i):
            break
        quote = next((q for q in quotes if line.startswith(q, i)), None)
        if quote is not None:
            i += len(quote)
            continue
        code.append(line[i])
        i += 1
    if quote is not None and quote not in multiline:
        quote = None
    return "".join(code), quote


def _py_code(line: str, open_quote: str | None) -> tuple[str, str | None]:
    return _code_only(line, open_quote, _PY_QUOTES, _PY_MULTILINE, "#")


def _js_code(line: str, open_quote: str | None) -> tuple[str, str | None]:
    return _code_only(line, open_quote, _JS_QUOTES, _JS_MULTILINE, "//")


def _bracket_depth(code: str) -> int:
    return sum(code.count(c) for c in "([{") - sum(code.count(c) for c in ")]}")


def _py_statements(lines: list[str]) -> Iterator[tuple[int, int, str]]:
    """(line, indent, text) of each logical statement.

    Bracketed continuations and multi-line strings are joined onto the line
    that opened them; lines inside a string never start a statement.
    """
    open_quote: str | None = None
    index = 0
    while index < len(lines):
        line = lines[index]
        start = index + 1
        index += 1
        if open_quote is not None:
            _, open_quote = _py_code(line, open_quote)
            continue
        text = line.strip()
        if not text or text.startswith("#"):
            continue
        code, open_quote = _py_code(line, None)
        depth = _bracket_depth(code)
        while (depth > 0 or open_quote is not None) and index < len(lines):
            nxt = lines[index]
            index += 1
            nxt_code, open_quote = _py_code(nxt, open_quote)
            text = f"{text} {nxt.strip()}"
            depth += _bracket_depth(nxt_code)
        yield start, len(line) - len(line.lstrip()), text


def _signature(
    name: str, kind: SignatureKind, signature: str, line: int, exported: bool = True
) -> SignatureInfo:
    return SignatureInfo(name=name, kind=kind, signature=signature, exported=exported, line=line)


def _match_rules(
    table: tuple[SignatureRule, ...], text: str
) -> tuple[SignatureRule, re.Match[str]] | None:
    for rule in table:
        match = rule.pattern.match(text)
        if match is not None:
            return rule, match
    return None


def _extract_python(lines: list[str]) -> list[SignatureInfo]:
    signatures: list[SignatureInfo] = []
    class_name: str | None = None
    method_indent: int | None = None
    for number, indent, text in _py_statements(lines):
        if indent == 0:
            class_name = method_indent = None
            found = _match_rules(PY_SIGNATURE_RULES, text)
            if found is None:
                continue
            rule, match = found
            if match[1].startswith("_"):
                continue
            signatures.append(_signature(match[1], rule.kind, rule.render(match, text), number))
            if rule.kind == "class":
                class_name = match[1]
            continue
        if class_name is None:
            continue
        if method_indent is None:
            method_indent = indent
        if indent != method_indent:
            continue
        if match := _PY_DEF.match(text):
            signatures.append(
                _signature(
                    f"{class_name}.{match[1]}", "method", _py_def(match, text), number, False
                )
            )
    return signatures


def _extract_js(lines: list[str]) -> list[SignatureInfo]:
    signatures: list[SignatureInfo] = []
    open_quote: str | None = None
    depth = 0
    class_name: str | None = None
    class_depth = 0
    class_open = False
    for number, line in enumerate(lines, start=1):
        in_string = open_quote is not None
        code, open_quote = _js_code(line, open_quote)
        text = line.strip()
        if not in_string and text:
            if class_name is not None and depth == class_depth + 1:
                match = _JS_METHOD.match(text)
                if match is not None and match[1] not in _JS_NOT_METHODS:
                    ret = f": {match[3].strip()}" if match[3] else ""
                    signatures.append(
                        _signature(
                            f"{class_name}.{match[1]}",
                            "method",
                            f"{match[1]}({match[2]}){ret}",
                            number,
                            False,
                        )
                    )
            elif found := _match_rules(JS_SIGNATURE_RULES, text):
                rule, match = found
                signatures.append(
                    _signature(match[1], rule.kind, rule.render(match, text), number)
                )
                if rule.kind == "class":
                    class_name, class_depth, class_open = match[1], depth, False
        depth += code.count("{") - code.count("}")
        if class_name is not None:
            if depth > class_depth:
                class_open = True
            elif class_open:
                class_name = None
    return signatures


def extract_signatures(content: str, path: str = "") -> list[SignatureInfo]:
    """Signatures of a source text in source order.

    Exported names make up the contract. Methods of exported classes are
    listed too, as non-exported entries.
    """
    lines = content.split("\n")
    if rules_for(path) is PY_SIGNATURE_RULES:
        return _extract_python(lines)
    return _extract_js(lines)


def contract_hash(signatures: Iterable[SignatureInfo]) -> str:
    """Hash of the exported signature texts; non-exported entries are ignored."""
    exported = (s.signature for s in signatures if s.exported)
    return hashlib.md5("\n".join(exported).encode()).hexdigest()


def compare_contracts(old: FileContract | None, new: FileContract) -> ContractDiff:
    """Diff two contracts by signature name. No old contract: everything is added."""
    if old is None:
        return ContractDiff(added=new.exported_signatures)

    old_by_name = {s.name: s for s in old.exported_signatures}
    new_by_name = {s.name: s for s in new.exported_signatures}

    added: list[SignatureInfo] = []
    modified: list[tuple[SignatureInfo, SignatureInfo]] = []
    unchanged = 0
    for name, sig in new_by_name.items():
        previous = old_by_name.get(name)
        if previous is None:
            added.append(sig)
        elif previous.signature != sig.signature:
            modified.append((previous, sig))
        else:
            unchanged += 1

    removed = [sig for name, sig in old_by_name.items() if name not in new_by_name]
    return ContractDiff(added=added, removed=removed, modified=modified, unchanged=unchanged)


class ContractStore:
    """Contract snapshots persisted to ``contracts.json``."""

    def __init__(self, repo_root: Path, *, state_dir: str = RAG_DIR_NAME) -> None:
        self._root = repo_root
        self._path = repo_root / state_dir / CONTRACTS_FILE

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> ContractDocument | None:
        return load_document(self._path, ContractDocument)

    def snapshot(self) -> ContractDocument:
        return self.load() or ContractDocument()

    def capture_file_contract(self, file_path: str) -> FileContract:
        """Extract the current contract of a file. Missing files have none."""
        path = normalize_path(file_path, self._root)
        try:
            content = (self._root / path).read_text(encoding="utf-8", errors="replace")
        except OSError:
            content = ""
        signatures = extract_signatures(content, path)
        return FileContract(file_path=path, hash=contract_hash(signatures), signatures=signatures)

    def get(self, file_path: str) -> FileContract | None:
        return self.snapshot().files.get(normalize_path(file_path, self._root))

    def has_contract_changed(self, file_path: str) -> bool:
        """True when the file was never captured or its contract hash moved."""
        previous = self.get(file_path)
        if previous is None:
            return True
        return previous.hash != self.capture_file_contract(file_path).hash

    def update_snapshot(self, file_path: str) -> tuple[FileContract, ContractDiff]:
        ((contract, diff),) = self.update_snapshots([file_path])
        return contract, diff

    def update_snapshots(self, file_paths: Iterable[str]) -> list[tuple[FileContract, ContractDiff]]:
        """Capture several files and persist the snapshot once."""
        doc = self.snapshot()
        results = []
        for file_path in file_paths:
            contract = self.capture_file_contract(file_path)
            diff = compare_contracts(doc.files.get(contract.file_path), contract)
            contract.last_checked = utc_now()
            doc.files[contract.file_path] = contract
            results.append((contract, diff))
            log.debug(
                "contract_captured",
                file=contract.file_path,
                signatures=len(contract.signatures),
                changed=diff.has_changes,
            )
        write_document(self._path, doc)
        return results

    def affected_by_change(self, file_path: str, graph: DependencyGraph | None) -> list[str]:
        """Transitive importers of a tracked file."""
        if graph is None or self.get(file_path) is None:
            return []
        return graph.get_importers(normalize_path(file_path, self._root), transitive=True)
