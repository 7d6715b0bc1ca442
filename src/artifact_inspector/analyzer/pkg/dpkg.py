"""Debian dpkg status database parser."""

import posixpath
import re

from ...core.types import (
    AnalyzerGroup,
    AnalyzerType,
    FileFinding,
    Package,
    PackageFinding,
    PackageInfo,
)
from ..base import AnalysisTarget, Analyzer, decode_text

DPKG_STATUS_PATH = "var/lib/dpkg/status"
DPKG_STATUS_DIR = "var/lib/dpkg/status.d"

# "Source: glibc (2.28-10)" or "Source: glibc"
SOURCE_PATTERN = re.compile(r"^(?P<name>\S+)(?:\s+\((?P<version>[^)]+)\))?$")


def _is_installed(status: str) -> bool:
    # "want flag status", e.g. "install ok installed"
    parts = status.split()
    return len(parts) == 3 and parts[2] == "installed"


def _parse_stanza(fields: dict[str, str]) -> Package | None:
    name = fields.get("Package")
    version = fields.get("Version")
    if not name or not version:
        return None
    if "Status" in fields and not _is_installed(fields["Status"]):
        return None

    src_name, src_version = name, version
    source = fields.get("Source")
    if source:
        match = SOURCE_PATTERN.match(source)
        if match:
            src_name = match.group("name")
            src_version = match.group("version") or version
    return Package(name=name, version=version, src_name=src_name, src_version=src_version)


def parse_dpkg_status(text: str) -> list[Package]:
    """Parse a dpkg status file.

    Packages whose status is not "installed" are skipped. Continuation lines
    (starting with whitespace) are ignored.

    Args:
        text: Status file content

    Returns:
        Installed packages in file order
    """
    packages: list[Package] = []
    fields: dict[str, str] = {}

    for line in text.splitlines() + [""]:
        if not line.strip():
            if fields:
                pkg = _parse_stanza(fields)
                if pkg is not None:
                    packages.append(pkg)
                fields = {}
            continue
        if line[0] in " \t":
            continue
        key, sep, value = line.partition(":")
        if sep:
            fields[key.strip()] = value.strip()
    return packages


class DpkgAnalyzer(Analyzer):
    """Extract installed packages from the dpkg status database."""

    type = AnalyzerType.DPKG
    group = AnalyzerGroup.PKG

    def matches(self, file_path: str) -> bool:
        if file_path == DPKG_STATUS_PATH:
            return True
        return posixpath.dirname(file_path) == DPKG_STATUS_DIR

    def analyze(self, target: AnalysisTarget) -> list[FileFinding]:
        packages = parse_dpkg_status(decode_text(target.content))
        if not packages:
            return []
        return [
            PackageFinding(
                package_info=PackageInfo(file_path=target.file_path, packages=tuple(packages))
            )
        ]
