"""Data models and configuration for artifact inspection."""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Union

BLOB_JSON_SCHEMA_VERSION = 1


class AnalyzerType(str, Enum):
    """Stable tags identifying the built-in analyzers."""

    ALPINE = "alpine"
    DEBIAN = "debian"
    APK = "apk"
    DPKG = "dpkg"
    NPM = "npm"
    PIP = "pip"
    DOCKERFILE = "dockerfile"

    def __str__(self) -> str:
        return self.value


class AnalyzerGroup(str, Enum):
    """Broad analyzer kinds, in dispatch order."""

    OS = "os"
    PKG = "pkg"
    LANG = "lang"
    CONFIG = "config"

    def __str__(self) -> str:
        return self.value


GROUP_ORDER: tuple[AnalyzerGroup, ...] = (
    AnalyzerGroup.OS,
    AnalyzerGroup.PKG,
    AnalyzerGroup.LANG,
    AnalyzerGroup.CONFIG,
)

DEFAULT_ENABLED_GROUPS: frozenset[AnalyzerGroup] = frozenset(
    {AnalyzerGroup.OS, AnalyzerGroup.PKG, AnalyzerGroup.LANG}
)


@dataclass(frozen=True)
class OS:
    """Operating system identity."""

    family: str
    name: str


@dataclass(frozen=True)
class Package:
    """Installed OS package."""

    name: str
    version: str
    src_name: str = ""
    src_version: str = ""


@dataclass(frozen=True)
class PackageInfo:
    """Packages found in one package database file."""

    file_path: str
    packages: tuple[Package, ...] = ()


@dataclass(frozen=True)
class LibraryInfo:
    """Application dependency."""

    name: str
    version: str


@dataclass(frozen=True)
class Application:
    """Dependencies declared by one application manifest or lock file."""

    type: str
    file_path: str
    libraries: tuple[LibraryInfo, ...] = ()


@dataclass(frozen=True)
class ConfigFile:
    """Parsed configuration file.

    ``content`` holds JSON-compatible data.
    """

    type: str
    file_path: str
    content: Any = None


@dataclass(frozen=True)
class OSFinding:
    os: OS


@dataclass(frozen=True)
class PackageFinding:
    package_info: PackageInfo


@dataclass(frozen=True)
class ApplicationFinding:
    application: Application


@dataclass(frozen=True)
class ConfigFinding:
    config: ConfigFile


FileFinding = Union[OSFinding, PackageFinding, ApplicationFinding, ConfigFinding]


@dataclass(frozen=True)
class BlobInfo:
    """Analysis record persisted in the artifact cache.

    Instances are built once per inspection from the composite result and
    are identified by the digest of their canonical JSON form.
    """

    schema_version: int
    diff_id: str
    os: OS | None = None
    package_infos: tuple[PackageInfo, ...] = ()
    applications: tuple[Application, ...] = ()
    configs: tuple[ConfigFile, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        """Convert to the JSON structure stored in the cache.

        Empty fields are omitted.
        """
        data: dict[str, Any] = {
            "schemaVersion": self.schema_version,
            "diffID": self.diff_id,
        }
        if self.os is not None:
            data["os"] = {"family": self.os.family, "name": self.os.name}
        if self.package_infos:
            data["packageInfos"] = [
                {
                    "filePath": info.file_path,
                    "packages": [_package_to_dict(pkg) for pkg in info.packages],
                }
                for info in self.package_infos
            ]
        if self.applications:
            data["applications"] = [
                {
                    "type": app.type,
                    "filePath": app.file_path,
                    "libraries": [
                        {"name": lib.name, "version": lib.version}
                        for lib in app.libraries
                    ],
                }
                for app in self.applications
            ]
        if self.configs:
            data["configs"] = [
                {"type": cfg.type, "filePath": cfg.file_path, "content": cfg.content}
                for cfg in self.configs
            ]
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "BlobInfo":
        """Restore a record from its JSON structure.

        Raises:
            KeyError: If a required field is missing
        """
        os_data = data.get("os")
        return cls(
            schema_version=data["schemaVersion"],
            diff_id=data["diffID"],
            os=OS(family=os_data["family"], name=os_data["name"]) if os_data else None,
            package_infos=tuple(
                PackageInfo(
                    file_path=info["filePath"],
                    packages=tuple(
                        Package(
                            name=pkg["name"],
                            version=pkg["version"],
                            src_name=pkg.get("srcName", ""),
                            src_version=pkg.get("srcVersion", ""),
                        )
                        for pkg in info.get("packages", [])
                    ),
                )
                for info in data.get("packageInfos", [])
            ),
            applications=tuple(
                Application(
                    type=app["type"],
                    file_path=app["filePath"],
                    libraries=tuple(
                        LibraryInfo(name=lib["name"], version=lib["version"])
                        for lib in app.get("libraries", [])
                    ),
                )
                for app in data.get("applications", [])
            ),
            configs=tuple(
                ConfigFile(
                    type=cfg["type"], file_path=cfg["filePath"], content=cfg.get("content")
                )
                for cfg in data.get("configs", [])
            ),
        )


def _package_to_dict(pkg: Package) -> dict[str, str]:
    data = {"name": pkg.name, "version": pkg.version}
    if pkg.src_name:
        data["srcName"] = pkg.src_name
    if pkg.src_version:
        data["srcVersion"] = pkg.src_version
    return data


@dataclass(frozen=True)
class ArtifactReference:
    """Result of a successful inspection."""

    name: str
    id: str
    blob_ids: tuple[str, ...]


@dataclass
class ScannerOption:
    """Scanner configuration.

    Attributes:
        enabled_groups: Analyzer groups enabled for the scan
        skip_files: fnmatch patterns of relative file paths to ignore
        skip_dirs: fnmatch patterns of relative directory paths to ignore
        follow_symlinks: Follow symlinks whose target stays inside the root
        concurrency: Maximum number of files analyzed at the same time
        artifact_name: Name reported in the artifact reference
        file_size_limit: Files larger than this (bytes) are hashed but not analyzed
    """

    enabled_groups: frozenset[AnalyzerGroup] = DEFAULT_ENABLED_GROUPS
    skip_files: tuple[str, ...] = ()
    skip_dirs: tuple[str, ...] = ()
    follow_symlinks: bool = False
    concurrency: int = 5
    artifact_name: str = "host"
    file_size_limit: int | None = None

    def __post_init__(self) -> None:
        if self.concurrency < 1:
            raise ValueError(f"concurrency must be at least 1, got {self.concurrency}")
        if self.file_size_limit is not None and self.file_size_limit < 0:
            raise ValueError(f"file_size_limit must not be negative: {self.file_size_limit}")
        self.enabled_groups = frozenset(AnalyzerGroup(g) for g in self.enabled_groups)
        self.skip_files = tuple(self.skip_files)
        self.skip_dirs = tuple(self.skip_dirs)
