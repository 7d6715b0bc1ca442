"""Analyzer registry.

Registries are built explicitly and are read-only once built, so they can
be shared by concurrent inspections without locking.
"""

from collections.abc import Iterable
from functools import lru_cache

from ..core.types import GROUP_ORDER, AnalyzerGroup, AnalyzerType
from .base import Analyzer


def _sort_key(analyzer: Analyzer) -> tuple[int, str]:
    return (GROUP_ORDER.index(analyzer.group), str(analyzer.type))


class AnalyzerRegistry:
    """Immutable set of analyzers."""

    def __init__(self, analyzers: Iterable[Analyzer] = ()) -> None:
        analyzers = list(analyzers)
        seen: set[str] = set()
        for analyzer in analyzers:
            type_tag = str(analyzer.type)
            if type_tag in seen:
                raise ValueError(f"analyzer type {type_tag} registered twice")
            if analyzer.group not in GROUP_ORDER:
                raise ValueError(f"analyzer {type_tag} has an unknown group: {analyzer.group}")
            seen.add(type_tag)
        self._analyzers: tuple[Analyzer, ...] = tuple(sorted(analyzers, key=_sort_key))

    @property
    def analyzers(self) -> tuple[Analyzer, ...]:
        return self._analyzers

    @property
    def types(self) -> tuple[str, ...]:
        return tuple(str(a.type) for a in self._analyzers)

    def __len__(self) -> int:
        return len(self._analyzers)

    def __iter__(self):
        return iter(self._analyzers)

    def filtered(
        self,
        disabled_types: Iterable[AnalyzerType | str] = (),
        enabled_groups: Iterable[AnalyzerGroup] | None = None,
    ) -> tuple[Analyzer, ...]:
        """Return the analyzers active for a scan.

        Args:
            disabled_types: Analyzer type tags to leave out
            enabled_groups: Groups to keep; every group when None

        Returns:
            Analyzers in group order, then by type tag
        """
        disabled = {str(t) for t in disabled_types}
        groups = None if enabled_groups is None else set(enabled_groups)
        return tuple(
            analyzer
            for analyzer in self._analyzers
            if str(analyzer.type) not in disabled
            and (groups is None or analyzer.group in groups)
        )


def by_group(analyzers: Iterable[Analyzer]) -> dict[AnalyzerGroup, tuple[Analyzer, ...]]:
    """Group analyzers by kind, keeping their order."""
    grouped: dict[AnalyzerGroup, list[Analyzer]] = {}
    for analyzer in analyzers:
        grouped.setdefault(analyzer.group, []).append(analyzer)
    return {group: tuple(items) for group, items in grouped.items()}


class RegistryBuilder:
    """Collect analyzers at startup and freeze them into a registry."""

    def __init__(self) -> None:
        self._analyzers: list[Analyzer] = []

    def register(self, analyzer: Analyzer) -> "RegistryBuilder":
        self._analyzers.append(analyzer)
        return self

    def register_all(self, analyzers: Iterable[Analyzer]) -> "RegistryBuilder":
        self._analyzers.extend(analyzers)
        return self

    def build(self) -> AnalyzerRegistry:
        """Build the registry.

        Raises:
            ValueError: If two analyzers share a type tag
        """
        return AnalyzerRegistry(self._analyzers)


def builtin_analyzers() -> list[Analyzer]:
    """Instantiate every built-in analyzer."""
    from .config import DockerfileAnalyzer
    from .lang import NpmLockAnalyzer, PipRequirementsAnalyzer
    from .os import AlpineReleaseAnalyzer, DebianVersionAnalyzer
    from .pkg import ApkAnalyzer, DpkgAnalyzer

    return [
        AlpineReleaseAnalyzer(),
        DebianVersionAnalyzer(),
        ApkAnalyzer(),
        DpkgAnalyzer(),
        NpmLockAnalyzer(),
        PipRequirementsAnalyzer(),
        DockerfileAnalyzer(),
    ]


@lru_cache(maxsize=1)
def default_registry() -> AnalyzerRegistry:
    """Registry holding every built-in analyzer, built on first use."""
    return RegistryBuilder().register_all(builtin_analyzers()).build()
