"""Tests for merging findings and the canonical blob form."""

import json

import pytest

from artifact_inspector.analyzer.result import CompositeResult
from artifact_inspector.core.types import (
    OS,
    Application,
    ApplicationFinding,
    BlobInfo,
    ConfigFile,
    ConfigFinding,
    LibraryInfo,
    OSFinding,
    Package,
    PackageFinding,
    PackageInfo,
)
from artifact_inspector.exceptions import AnalyzerError, ConsistencyError
from artifact_inspector.utils.canonical import (
    calculate_blob_id,
    canonicalize,
    to_canonical_json,
)
from artifact_inspector.utils.digest import validate_digest

DIFF_ID = "sha256:" + "ab" * 32

MUSL = Package("musl", "1.1.24-r2", "musl", "1.1.24-r2")
BUSYBOX = Package("busybox", "1.31.1-r9", "busybox", "1.31.1-r9")


def _package_finding(path, *packages):
    return PackageFinding(package_info=PackageInfo(file_path=path, packages=packages))


def _app_finding(app_type, path, *libraries):
    return ApplicationFinding(
        application=Application(type=app_type, file_path=path, libraries=libraries)
    )


class TestCompositeResult:
    """Merging analyzer findings."""

    def test_empty(self):
        result = CompositeResult()
        assert result.empty
        assert result.errors == []

    def test_merge_each_kind(self):
        result = CompositeResult()
        result.merge("alpine", [OSFinding(os=OS("alpine", "3.11.6"))])
        result.merge("apk", [_package_finding("lib/apk/db/installed", MUSL)])
        result.merge("npm", [_app_finding("npm", "app/package-lock.json", LibraryInfo("a", "1"))])
        result.merge(
            "dockerfile",
            [ConfigFinding(config=ConfigFile("dockerfile", "Dockerfile", [{"cmd": "FROM"}]))],
        )

        assert not result.empty
        assert result.os == OS("alpine", "3.11.6")
        assert result.os_source == "alpine"
        assert result.packages == {"lib/apk/db/installed": [MUSL]}
        assert result.applications == {("npm", "app/package-lock.json"): [LibraryInfo("a", "1")]}
        assert result.configs == {("dockerfile", "Dockerfile"): [{"cmd": "FROM"}]}

    def test_same_os_twice_is_accepted(self):
        result = CompositeResult()
        result.merge("alpine", [OSFinding(os=OS("alpine", "3.11.6"))])
        result.merge("other", [OSFinding(os=OS("alpine", "3.11.6"))])
        assert result.os_source == "alpine"

    def test_conflicting_os(self):
        result = CompositeResult()
        result.merge("alpine", [OSFinding(os=OS("alpine", "3.11.6"))])
        with pytest.raises(ConsistencyError) as exc_info:
            result.merge("debian", [OSFinding(os=OS("debian", "10.4"))])

        message = str(exc_info.value)
        assert "alpine" in message
        assert "debian" in message
        assert result.os == OS("alpine", "3.11.6")

    def test_same_config_twice_is_accepted(self):
        result = CompositeResult()
        config = ConfigFile("dockerfile", "Dockerfile", [{"cmd": "FROM"}])
        result.merge("dockerfile", [ConfigFinding(config=config)])
        result.merge("other", [ConfigFinding(config=config)])
        assert result.configs == {("dockerfile", "Dockerfile"): [{"cmd": "FROM"}]}

    def test_conflicting_config(self):
        result = CompositeResult()
        first = ConfigFile("dockerfile", "Dockerfile", [{"cmd": "FROM"}])
        second = ConfigFile("dockerfile", "Dockerfile", [{"cmd": "RUN"}])
        result.merge("dockerfile", [ConfigFinding(config=first)])

        with pytest.raises(ConsistencyError, match="conflicting dockerfile config for Dockerfile"):
            result.merge("other", [ConfigFinding(config=second)])
        assert result.configs == {("dockerfile", "Dockerfile"): [{"cmd": "FROM"}]}

    def test_unknown_finding(self):
        with pytest.raises(TypeError, match="unknown finding"):
            CompositeResult().merge("custom", [object()])

    def test_add_error(self):
        result = CompositeResult()
        error = AnalyzerError("npm", "package-lock.json", ValueError("bad json"))
        result.add_error(error)
        assert result.errors == [error]
        assert result.empty


class TestCanonicalize:
    """Order-independent canonical form."""

    def _fill(self, result, reverse=False):
        merges = [
            ("apk", [_package_finding("lib/apk/db/installed", MUSL, BUSYBOX)]),
            ("dpkg", [_package_finding("var/lib/dpkg/status", Package("bash", "5.0-4"))]),
            ("npm", [_app_finding("npm", "b/package-lock.json", LibraryInfo("z", "1"))]),
            (
                "npm",
                [
                    _app_finding(
                        "npm",
                        "a/package-lock.json",
                        LibraryInfo("y", "2"),
                        LibraryInfo("x", "1"),
                    )
                ],
            ),
            ("pip", [_app_finding("pip", "a/requirements.txt", LibraryInfo("requests", "2.31.0"))]),
        ]
        if reverse:
            merges = [
                (analyzer_type, [self._reversed(f) for f in findings])
                for analyzer_type, findings in reversed(merges)
            ]
        for analyzer_type, findings in merges:
            result.merge(analyzer_type, findings)
        return result

    @staticmethod
    def _reversed(finding):
        if isinstance(finding, PackageFinding):
            info = finding.package_info
            return _package_finding(info.file_path, *reversed(info.packages))
        app = finding.application
        return _app_finding(app.type, app.file_path, *reversed(app.libraries))

    def test_sorted_groups(self):
        blob = canonicalize(self._fill(CompositeResult()), DIFF_ID)

        assert blob.schema_version == 1
        assert blob.diff_id == DIFF_ID
        assert [info.file_path for info in blob.package_infos] == [
            "lib/apk/db/installed",
            "var/lib/dpkg/status",
        ]
        assert blob.package_infos[0].packages == (BUSYBOX, MUSL)
        assert [(app.type, app.file_path) for app in blob.applications] == [
            ("npm", "a/package-lock.json"),
            ("npm", "b/package-lock.json"),
            ("pip", "a/requirements.txt"),
        ]
        assert blob.applications[0].libraries == (LibraryInfo("x", "1"), LibraryInfo("y", "2"))

    def test_insertion_order_does_not_matter(self):
        forward = canonicalize(self._fill(CompositeResult()), DIFF_ID)
        backward = canonicalize(self._fill(CompositeResult(), reverse=True), DIFF_ID)

        assert forward == backward
        assert to_canonical_json(forward) == to_canonical_json(backward)
        assert calculate_blob_id(forward) == calculate_blob_id(backward)


class TestCanonicalJSON:
    """Serialized blob records."""

    def test_keys_and_omitted_fields(self):
        blob = BlobInfo(
            schema_version=1,
            diff_id=DIFF_ID,
            os=OS("alpine", "3.11.6"),
            package_infos=(
                PackageInfo("lib/apk/db/installed", (MUSL, Package("plain", "1.0"))),
            ),
        )
        raw = to_canonical_json(blob)
        data = json.loads(raw)

        assert list(data) == ["diffID", "os", "packageInfos", "schemaVersion"]
        assert "applications" not in data
        assert "configs" not in data
        assert data["packageInfos"][0]["packages"][1] == {"name": "plain", "version": "1.0"}
        assert b" " not in raw

    def test_blob_id_format(self):
        blob = BlobInfo(schema_version=1, diff_id=DIFF_ID)
        blob_id = calculate_blob_id(blob)
        assert validate_digest(blob_id)
        assert blob_id.startswith("sha256:")

    def test_blob_id_changes_with_content(self):
        empty = BlobInfo(schema_version=1, diff_id=DIFF_ID)
        with_os = BlobInfo(schema_version=1, diff_id=DIFF_ID, os=OS("alpine", "3.11.6"))
        assert calculate_blob_id(empty) != calculate_blob_id(with_os)

    def test_non_ascii_is_escaped(self):
        blob = BlobInfo(
            schema_version=1,
            diff_id=DIFF_ID,
            configs=(ConfigFile("dockerfile", "Dockerfile", [{"value": "Teräs"}]),),
        )
        raw = to_canonical_json(blob)
        assert b"Ter\\u00e4s" in raw
        assert raw.isascii()

    def test_undecodable_file_name(self):
        """Lone surrogates from non-UTF-8 file names serialize and read back."""
        path = "srv\udcff/requirements.txt"
        blob = BlobInfo(
            schema_version=1,
            diff_id=DIFF_ID,
            applications=(Application("pip", path, (LibraryInfo("a", "1"),)),),
        )
        raw = to_canonical_json(blob)

        assert b"srv\\udcff/requirements.txt" in raw
        assert BlobInfo.from_dict(json.loads(raw)).applications[0].file_path == path
        assert validate_digest(calculate_blob_id(blob))

    def test_from_dict_restores_record(self):
        blob = BlobInfo(
            schema_version=1,
            diff_id=DIFF_ID,
            os=OS("debian", "10.4"),
            package_infos=(PackageInfo("var/lib/dpkg/status", (MUSL,)),),
            applications=(Application("pip", "requirements.txt", (LibraryInfo("a", "1"),)),),
            configs=(ConfigFile("dockerfile", "Dockerfile", [{"cmd": "FROM"}]),),
        )
        assert BlobInfo.from_dict(json.loads(to_canonical_json(blob))) == blob
