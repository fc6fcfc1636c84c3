"""
Tests for the memory safety probes and the npm packaging probe.
"""

import json

import pytest

from scorecard.checker.raw_results import (
    LanguageStat,
    NpmPackageData,
    NpmRegistryLookup,
    RawResults,
    SourceCodeData,
    SourceFile,
)
from scorecard.errors import ProbeExecutionError
from scorecard.finding.outcome import Outcome
from scorecard.probes import memory_safety
from scorecard.probes.packaging import packaged_with_npm

SAFE_GO = """package main

import "fmt"

func main() { fmt.Println("hi") }
"""

UNSAFE_GO = """package main

import (
	"fmt"
	// "os"
	"unsafe"
)

func main() { fmt.Println(unsafe.Sizeof(0)) }
"""

UNSAFE_CSPROJ = """<Project Sdk="Microsoft.NET.Sdk">
  <PropertyGroup>
    <AllowUnsafeBlocks>true</AllowUnsafeBlocks>
  </PropertyGroup>
</Project>
"""

NAMESPACED_CSPROJ = """<Project xmlns="http://schemas.microsoft.com/developer/msbuild/2003">
  <PropertyGroup>
    <AllowUnsafeBlocks>True</AllowUnsafeBlocks>
  </PropertyGroup>
</Project>
"""

SAFE_CSPROJ = """<Project Sdk="Microsoft.NET.Sdk">
  <PropertyGroup>
    <TargetFramework>net8.0</TargetFramework>
  </PropertyGroup>
</Project>
"""


def _source_raw(now, languages, *files):
    return RawResults(now=now, source_code=SourceCodeData(
        languages=tuple(LanguageStat(name, lines) for name, lines in languages),
        files=tuple(SourceFile(path, content) for path, content in files),
    ))


def outcomes(findings):
    return [f.outcome for f in findings]


# ============================================================================
# GO IMPORTS
# ============================================================================

class TestGoImports:

    def test_block_imports_with_lines(self):
        assert memory_safety.go_imports(UNSAFE_GO) == [("fmt", 4), ("unsafe", 6)]

    def test_commented_import_is_ignored(self):
        code = 'package main\n\n// import "unsafe"\nimport "fmt"\n'
        assert memory_safety.go_imports(code) == [("fmt", 4)]

    def test_aliased_import(self):
        assert memory_safety.go_imports('package x\nimport u "unsafe"\n') == [("unsafe", 2)]

    def test_missing_package_clause(self):
        with pytest.raises(memory_safety.MalformedFileError):
            memory_safety.go_imports('import "unsafe"\n')


class TestCSharpProjects:

    @pytest.mark.parametrize("content,expected", [
        (UNSAFE_CSPROJ, True),
        (NAMESPACED_CSPROJ, True),
        (SAFE_CSPROJ, False),
    ])
    def test_allows_unsafe_blocks(self, content, expected):
        assert memory_safety.allows_unsafe_blocks(content) is expected

    def test_malformed_project(self):
        with pytest.raises(memory_safety.MalformedFileError):
            memory_safety.allows_unsafe_blocks("<Project>")


class TestLanguageSelection:

    def test_small_languages_are_not_prominent(self):
        languages = [LanguageStat("go", 1000), LanguageStat("c#", 10), LanguageStat("python", 500)]
        assert memory_safety.prominent_languages(languages) == ["go"]

    def test_all_languages(self):
        assert memory_safety.prominent_languages([LanguageStat("all")]) == ["go", "c#"]
        assert memory_safety.supported_languages([LanguageStat("all")]) == ["go", "c#"]

    def test_supported_ignores_size(self):
        languages = [LanguageStat("go", 1000), LanguageStat("c#", 10)]
        assert memory_safety.supported_languages(languages) == ["go", "c#"]


# ============================================================================
# PROBES
# ============================================================================

class TestMemorysafe:

    def test_safe_go(self, now):
        raw = _source_raw(now, [("go", 100)], ("main.go", SAFE_GO))
        findings, _ = memory_safety.memorysafe(raw)
        assert outcomes(findings) == [Outcome.TRUE]
        assert findings[0].message == "Golang code does not use the unsafe package"

    def test_unsafe_go(self, now):
        raw = _source_raw(now, [("go", 100)], ("main.go", SAFE_GO), ("mem/ptr.go", UNSAFE_GO))
        findings, _ = memory_safety.memorysafe(raw)
        assert outcomes(findings) == [Outcome.FALSE]
        assert findings[0].location.path == "mem/ptr.go"

    def test_unsafe_csharp(self, now):
        raw = _source_raw(now, [("c#", 100)], ("src/App.csproj", UNSAFE_CSPROJ))
        findings, _ = memory_safety.memorysafe(raw)
        assert outcomes(findings) == [Outcome.FALSE]
        assert findings[0].message == "C# code allows the use of unsafe blocks"

    def test_malformed_files_are_skipped(self, now):
        raw = _source_raw(now, [("go", 100)], ("broken.go", 'import "unsafe"'))
        assert outcomes(memory_safety.memorysafe(raw)[0]) == [Outcome.TRUE]

    def test_unsupported_languages(self, now):
        raw = _source_raw(now, [("python", 100)])
        with pytest.raises(ProbeExecutionError):
            memory_safety.memorysafe(raw)


class TestUnsafeblock:

    def test_reports_each_use(self, now):
        raw = _source_raw(now, [("go", 1000), ("c#", 1)],
                          ("mem/ptr.go", UNSAFE_GO), ("src/App.csproj", UNSAFE_CSPROJ))
        findings, _ = memory_safety.unsafeblock(raw)
        assert outcomes(findings) == [Outcome.TRUE, Outcome.TRUE]
        assert findings[0].location.line_start == 6
        assert findings[1].location.path == "src/App.csproj"

    def test_no_unsafe_code(self, now):
        raw = _source_raw(now, [("go", 100)], ("main.go", SAFE_GO))
        findings, _ = memory_safety.unsafeblock(raw)
        assert outcomes(findings) == [Outcome.FALSE]
        assert findings[0].message == "All supported ecosystems do not declare or use unsafe code blocks"

    def test_unsupported_language_files_are_ignored(self, now):
        raw = _source_raw(now, [("python", 100)], ("mem/ptr.go", UNSAFE_GO))
        assert outcomes(memory_safety.unsafeblock(raw)[0]) == [Outcome.FALSE]


# ============================================================================
# NPM
# ============================================================================

def _npm_raw(now, manifest=None, **lookup):
    registry = NpmRegistryLookup(name="left-pad", **lookup) if lookup else None
    return RawResults(now=now, npm_package=NpmPackageData(package_json=manifest, registry=registry))


class TestPackagedWithNpm:

    def test_published(self, now):
        raw = _npm_raw(now, json.dumps({"name": "left-pad"}), exists=True,
                       repository_url="https://github.com/left-pad/left-pad")
        findings, _ = packaged_with_npm(raw)
        assert outcomes(findings) == [Outcome.TRUE]
        assert findings[0].message == ("Package 'left-pad' is published on npm registry. "
                                       "Repository URL: https://github.com/left-pad/left-pad")
        assert findings[0].location.path == "package.json"

    def test_not_published(self, now):
        findings, _ = packaged_with_npm(_npm_raw(now, json.dumps({"name": "left-pad"}), exists=False))
        assert outcomes(findings) == [Outcome.FALSE]
        assert "not found on npm registry" in findings[0].message

    def test_no_package_json(self, now):
        findings, _ = packaged_with_npm(_npm_raw(now))
        assert outcomes(findings) == [Outcome.FALSE]
        assert findings[0].location is None

    @pytest.mark.parametrize("manifest,message", [
        ("{not json", "Found package.json but failed to parse it. Invalid JSON format."),
        ("[]", "Found package.json but failed to parse it. Invalid JSON format."),
        (json.dumps({"version": "1.0.0"}), "Found package.json but no package name specified."),
    ])
    def test_unusable_manifest(self, now, manifest, message):
        findings, _ = packaged_with_npm(_npm_raw(now, manifest))
        assert findings[0].message == message

    def test_registry_error(self, now):
        findings, _ = packaged_with_npm(_npm_raw(now, json.dumps({"name": "left-pad"}), error="timeout"))
        assert outcomes(findings) == [Outcome.FALSE]
        assert findings[0].message.endswith("failed to check npm registry: timeout")
