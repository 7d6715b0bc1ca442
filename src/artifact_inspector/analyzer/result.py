"""Accumulator for findings produced during one inspection."""

import logging
from dataclasses import dataclass, field
from typing import Any

from ..core.types import (
    OS,
    ApplicationFinding,
    ConfigFile,
    ConfigFinding,
    FileFinding,
    LibraryInfo,
    OSFinding,
    Package,
    PackageFinding,
)
from ..exceptions import AnalyzerError, ConsistencyError

logger = logging.getLogger(__name__)


@dataclass
class CompositeResult:
    """Findings of every analyzer, grouped by kind and originating file.

    Only the dispatcher's merge loop writes to an instance.
    """

    os: OS | None = None
    os_source: str | None = None
    packages: dict[str, list[Package]] = field(default_factory=dict)
    applications: dict[tuple[str, str], list[LibraryInfo]] = field(default_factory=dict)
    configs: dict[tuple[str, str], Any] = field(default_factory=dict)
    errors: list[AnalyzerError] = field(default_factory=list)

    def merge(self, analyzer_type: str, findings: list[FileFinding]) -> None:
        """Merge the findings one analyzer returned for one file.

        Raises:
            ConsistencyError: If a different OS identity, or different content
                for an already merged config file, is reported
            TypeError: If a finding is of an unknown kind
        """
        for finding in findings:
            if isinstance(finding, OSFinding):
                self._set_os(analyzer_type, finding.os)
            elif isinstance(finding, PackageFinding):
                info = finding.package_info
                self.packages.setdefault(info.file_path, []).extend(info.packages)
            elif isinstance(finding, ApplicationFinding):
                app = finding.application
                key = (app.type, app.file_path)
                self.applications.setdefault(key, []).extend(app.libraries)
            elif isinstance(finding, ConfigFinding):
                self._set_config(analyzer_type, finding.config)
            else:
                raise TypeError(
                    f"{analyzer_type} analyzer returned an unknown finding: {finding!r}"
                )

    def _set_os(self, analyzer_type: str, os_info: OS) -> None:
        if self.os is None:
            self.os = os_info
            self.os_source = analyzer_type
            return
        if self.os == os_info:
            logger.debug(f"OS {os_info.family} {os_info.name} reported again by {analyzer_type}")
            return
        raise ConsistencyError(
            f"conflicting OS detected: {self.os_source} reported "
            f"{self.os.family} {self.os.name}, {analyzer_type} reported "
            f"{os_info.family} {os_info.name}"
        )

    def _set_config(self, analyzer_type: str, cfg: ConfigFile) -> None:
        key = (cfg.type, cfg.file_path)
        if key not in self.configs:
            self.configs[key] = cfg.content
            return
        if self.configs[key] == cfg.content:
            return
        raise ConsistencyError(
            f"conflicting {cfg.type} config for {cfg.file_path} reported by {analyzer_type}"
        )

    def add_error(self, error: AnalyzerError) -> None:
        self.errors.append(error)

    @property
    def empty(self) -> bool:
        return (
            self.os is None
            and not self.packages
            and not self.applications
            and not self.configs
        )
