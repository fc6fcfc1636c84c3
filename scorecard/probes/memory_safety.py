"""
Memory Safety Probes
====================
Use of memory-unsafe escape hatches in memory-safe languages: the
``unsafe`` package in Go and ``AllowUnsafeBlocks`` in C# project files.

``memorysafe`` looks at the prominent languages of the repository and
reports False where unsafe code is used. ``unsafeblock`` looks at every
supported language and reports True for each unsafe use it finds. Both
are independent probes: no check consumes them.

Author: Scorecard Team
"""

from fnmatch import fnmatch
from typing import Callable, Dict, List, Optional, Sequence, Tuple
import logging
import re
import xml.etree.ElementTree as ElementTree

from scorecard.checker.raw_results import LanguageStat, RawResults, SourceCodeData, SourceFile
from scorecard.errors import ProbeExecutionError
from scorecard.finding.finding import FileType, Finding, Location
from scorecard.finding.outcome import Outcome
from scorecard.probes.utils import new_finding, require

logger = logging.getLogger(__name__)

MEMORYSAFE = "memorysafe"
UNSAFEBLOCK = "unsafeblock"

GO = "go"
CSHARP = "c#"
ALL_LANGUAGES = "all"

_COMMENTS = re.compile(r'//[^\n]*|/\*.*?\*/', re.DOTALL)
_PACKAGE_CLAUSE = re.compile(r'^\s*package\s+\w+', re.MULTILINE)
_SINGLE_IMPORT = re.compile(r'^\s*import\s+(?:[\w.]+\s+)?"([^"]+)"', re.MULTILINE)
_IMPORT_BLOCK = re.compile(r'^\s*import\s*\(([^)]*)\)', re.MULTILINE)
_IMPORT_SPEC = re.compile(r'(?:[\w.]+\s+)?"([^"]+)"')


class MalformedFileError(ValueError):
    pass


def _source(raw: RawResults) -> SourceCodeData:
    require(raw, "raw results")
    return require(raw.source_code, "source code results")


def _matching_files(source: SourceCodeData, pattern: str) -> List[SourceFile]:
    return [f for f in source.files if fnmatch(f.path.lower(), pattern)]


# ============================================================================
# GO
# ============================================================================

def _blank_comments(match) -> str:
    # keep newlines so line numbers survive
    return re.sub(r'[^\n]', ' ', match.group(0))


def go_imports(content: str) -> List[Tuple[str, int]]:
    """
    Import paths of a Go file with the line declaring each one.

    Raises:
        MalformedFileError: If the file has no package clause
    """
    code = _COMMENTS.sub(_blank_comments, content)
    if not _PACKAGE_CLAUSE.search(code):
        raise MalformedFileError("missing package clause")

    imports = []
    for m in _SINGLE_IMPORT.finditer(code):
        imports.append((m.group(1), code.count('\n', 0, m.start(1)) + 1))
    for block in _IMPORT_BLOCK.finditer(code):
        for spec in _IMPORT_SPEC.finditer(block.group(1)):
            start = block.start(1) + spec.start(1)
            imports.append((spec.group(1), code.count('\n', 0, start) + 1))
    return sorted(imports, key=lambda item: item[1])


def unsafe_go_imports(source: SourceCodeData) -> List[Tuple[str, int]]:
    """Path and line of every import of the ``unsafe`` package; malformed files are skipped."""
    found = []
    for file in _matching_files(source, "*.go"):
        try:
            imports = go_imports(file.content)
        except MalformedFileError as e:
            logger.warning(f"malformed golang file {file.path}: {e}")
            continue
        found.extend((file.path, line) for path, line in imports if path == "unsafe")
    return found


# ============================================================================
# C#
# ============================================================================

def allows_unsafe_blocks(content: str) -> bool:
    """
    True when a project file sets ``AllowUnsafeBlocks`` to true in any
    property group.

    Raises:
        MalformedFileError: If the content is not well-formed XML
    """
    try:
        root = ElementTree.fromstring(content)
    except ElementTree.ParseError as e:
        raise MalformedFileError(str(e)) from None

    for element in root.iter():
        # project files may carry the MSBuild namespace
        if element.tag.rsplit('}', 1)[-1] == "AllowUnsafeBlocks":
            if (element.text or "").strip().lower() == "true":
                return True
    return False


def unsafe_csproj_files(source: SourceCodeData) -> List[str]:
    found = []
    for file in _matching_files(source, "*.csproj"):
        try:
            if allows_unsafe_blocks(file.content):
                found.append(file.path)
        except MalformedFileError as e:
            logger.warning(f"malformed csproj file {file.path}: {e}")
    return found


# ============================================================================
# LANGUAGE SELECTION
# ============================================================================

SUPPORTED_LANGUAGES = (GO, CSHARP)


def _language_names(languages: Sequence[LanguageStat]) -> Optional[List[str]]:
    """None stands for every supported language."""
    if len(languages) == 1 and languages[0].name.lower() == ALL_LANGUAGES:
        return None
    return [lang.name.lower() for lang in languages]


def prominent_languages(languages: Sequence[LanguageStat]) -> List[str]:
    """
    Supported languages with at least a quarter of the average lines of
    code per repository language.
    """
    if not languages:
        return []
    if _language_names(languages) is None:
        return list(SUPPORTED_LANGUAGES)

    lines: Dict[str, int] = {}
    for lang in languages:
        lines[lang.name.lower()] = lines.get(lang.name.lower(), 0) + lang.num_lines
    threshold = (sum(lines.values()) // len(languages)) // 4
    return [name for name in SUPPORTED_LANGUAGES if name in lines and lines[name] >= threshold]


def supported_languages(languages: Sequence[LanguageStat]) -> List[str]:
    names = _language_names(languages)
    if names is None:
        return list(SUPPORTED_LANGUAGES)
    return [name for name in SUPPORTED_LANGUAGES if name in names]


# ============================================================================
# PROBES
# ============================================================================

def _memorysafe_go(source: SourceCodeData) -> List[Finding]:
    found = unsafe_go_imports(source)
    if not found:
        return [new_finding(MEMORYSAFE, "Golang code does not use the unsafe package", Outcome.TRUE)]
    return [
        new_finding(MEMORYSAFE, "Golang code uses the unsafe package", Outcome.FALSE,
                    Location(type=FileType.SOURCE, path=path))
        for path, _ in found
    ]


def _memorysafe_csharp(source: SourceCodeData) -> List[Finding]:
    found = unsafe_csproj_files(source)
    if not found:
        return [new_finding(MEMORYSAFE, "C# code does not allow unsafe blocks", Outcome.TRUE)]
    return [
        new_finding(MEMORYSAFE, "C# code allows the use of unsafe blocks", Outcome.FALSE,
                    Location(type=FileType.SOURCE, path=path))
        for path in found
    ]


_MEMORYSAFE_RULES: Dict[str, Callable[[SourceCodeData], List[Finding]]] = {
    GO: _memorysafe_go,
    CSHARP: _memorysafe_csharp,
}


def memorysafe(raw: RawResults) -> Tuple[List[Finding], str]:
    """
    True per prominent language when no unsafe code is used, False for
    each file that uses it.

    Raises:
        ProbeExecutionError: If no prominent language is supported
    """
    source = _source(raw)
    languages = prominent_languages(source.languages)
    if not languages:
        raise ProbeExecutionError("no supported languages for this probe are found in repo")

    findings = []
    for language in languages:
        findings.extend(_MEMORYSAFE_RULES[language](source))
    return findings, MEMORYSAFE


def unsafeblock(raw: RawResults) -> Tuple[List[Finding], str]:
    source = _source(raw)
    languages = supported_languages(source.languages)

    findings = []
    if GO in languages:
        for path, line in unsafe_go_imports(source):
            findings.append(new_finding(UNSAFEBLOCK, "Golang code uses the unsafe package", Outcome.TRUE,
                                        Location(type=FileType.SOURCE, path=path, line_start=line)))
    if CSHARP in languages:
        for path in unsafe_csproj_files(source):
            findings.append(new_finding(UNSAFEBLOCK, "C# project file allows the use of unsafe blocks",
                                        Outcome.TRUE, Location(type=FileType.SOURCE, path=path)))

    if not findings:
        findings.append(new_finding(UNSAFEBLOCK, "All supported ecosystems do not declare or use unsafe code blocks",
                                    Outcome.FALSE))
    return findings, UNSAFEBLOCK
