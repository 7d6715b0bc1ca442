"""Alpine apk installed database parser."""

from ...core.types import (
    AnalyzerGroup,
    AnalyzerType,
    FileFinding,
    Package,
    PackageFinding,
    PackageInfo,
)
from ..base import AnalysisTarget, Analyzer, decode_text

APK_INSTALLED_PATH = "lib/apk/db/installed"


def parse_apk_installed(text: str) -> list[Package]:
    """Parse the apk installed database.

    Records are separated by blank lines; each line is a one-letter key,
    a colon and a value. P is the package name, V its version and o the
    origin (source) package.

    Args:
        text: Database content

    Returns:
        Packages in database order
    """
    packages: list[Package] = []
    fields: dict[str, str] = {}

    def flush() -> None:
        name = fields.get("P")
        version = fields.get("V")
        if name and version:
            packages.append(
                Package(
                    name=name,
                    version=version,
                    src_name=fields.get("o", name),
                    src_version=version,
                )
            )
        fields.clear()

    for line in text.splitlines():
        if not line.strip():
            flush()
            continue
        if len(line) < 2 or line[1] != ":":
            continue
        key = line[0]
        if key in ("P", "V", "o"):
            fields[key] = line[2:].strip()
    flush()
    return packages


class ApkAnalyzer(Analyzer):
    """Extract installed packages from lib/apk/db/installed."""

    type = AnalyzerType.APK
    group = AnalyzerGroup.PKG

    def matches(self, file_path: str) -> bool:
        return file_path == APK_INSTALLED_PATH

    def analyze(self, target: AnalysisTarget) -> list[FileFinding]:
        packages = parse_apk_installed(decode_text(target.content))
        if not packages:
            return []
        return [
            PackageFinding(
                package_info=PackageInfo(file_path=target.file_path, packages=tuple(packages))
            )
        ]
