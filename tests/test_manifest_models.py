"""Tests for build_updater.models.manifest."""

from __future__ import annotations

import pytest

from build_updater.exceptions import MissingRemoteFieldError
from build_updater.models.manifest import (
    ComponentRecord,
    LocalManifestRecord,
    ManifestDocument,
    needs_update,
)

BASE = {"version": "2", "url": "https://cdn.example.com/app.zip", "sha256": "ab" * 32}


class TestComponentRecord:
    def test_null_fields_become_blank(self) -> None:
        record = ComponentRecord.model_validate(
            {"version": None, "url": None, "sha256": None}
        )
        assert record == ComponentRecord()
        assert record.is_empty

    def test_fields_are_trimmed_on_parse(self) -> None:
        record = ComponentRecord(version=" 2 ", url="\thttps://x\n", sha256=" ab ")
        assert (record.version, record.url, record.sha256) == ("2", "https://x", "ab")

    def test_unknown_keys_are_ignored(self) -> None:
        record = ComponentRecord.model_validate({**BASE, "notes": "hello"})
        assert record.version == "2"


class TestNeedsUpdate:
    def test_identical_records_do_not_need_update(self) -> None:
        assert needs_update(ComponentRecord(**BASE), ComponentRecord(**BASE)) is False

    @pytest.mark.parametrize("field", ["version", "url", "sha256"])
    def test_any_single_differing_field_needs_update(self, field: str) -> None:
        remote = ComponentRecord(**{**BASE, field: BASE[field] + "x"})
        assert needs_update(ComponentRecord(**BASE), remote) is True

    @pytest.mark.parametrize("field", ["version", "url", "sha256"])
    def test_surrounding_whitespace_is_ignored(self, field: str) -> None:
        # model_construct skips the parse-time trimming.
        padded = ComponentRecord.model_construct(**{**BASE, field: f"  {BASE[field]} "})
        assert needs_update(padded, ComponentRecord(**BASE)) is False
        assert needs_update(ComponentRecord(**BASE), padded) is False

    def test_versions_compare_by_equality_only(self) -> None:
        local = ComponentRecord(**{**BASE, "version": "10"})
        remote = ComponentRecord(**{**BASE, "version": "9"})
        assert needs_update(local, remote) is True

    def test_absent_remote_never_needs_update(self) -> None:
        assert needs_update(ComponentRecord(**BASE), None) is False

    def test_empty_local_against_remote_needs_update(self) -> None:
        assert needs_update(None, ComponentRecord(**BASE)) is True


class TestManifestDocument:
    def test_parses_wire_shape(self) -> None:
        doc = ManifestDocument.model_validate(
            {"manifestUrl": " https://new.example.com/m.json ", "build": BASE}
        )
        assert doc.manifest_url == "https://new.example.com/m.json"
        assert doc.build == ComponentRecord(**BASE)
        assert doc.updater is None

    def test_missing_build_is_a_hard_error(self) -> None:
        doc = ManifestDocument.model_validate({"updater": BASE})
        with pytest.raises(MissingRemoteFieldError) as exc_info:
            doc.require_build()
        assert exc_info.value.field == "build"

    def test_with_manifest_url_returns_a_copy(self) -> None:
        doc = ManifestDocument.model_validate({"build": BASE})
        stamped = doc.with_manifest_url("https://a.example.com/m.json")
        assert stamped.manifest_url == "https://a.example.com/m.json"
        assert doc.manifest_url == ""

    def test_to_wire_uses_camel_case_and_skips_absent_sections(self) -> None:
        doc = ManifestDocument.model_validate({"manifestUrl": "u", "build": BASE})
        assert doc.to_wire() == {"manifestUrl": "u", "build": BASE}


class TestLocalManifestRecord:
    def test_empty_record_has_blank_sections(self) -> None:
        record = LocalManifestRecord()
        assert record.manifest_url == ""
        assert record.build.is_empty
        assert record.updater.is_empty

    def test_null_sections_become_empty_records(self) -> None:
        record = LocalManifestRecord.model_validate({"build": None, "updater": None})
        assert record == LocalManifestRecord()

    def test_from_applied_copies_remote_sections(self) -> None:
        remote = ManifestDocument.model_validate(
            {"build": BASE, "updater": {**BASE, "version": "u7"}}
        )
        record = LocalManifestRecord.from_applied(
            "https://m.example.com", remote, LocalManifestRecord()
        )
        assert record.manifest_url == "https://m.example.com"
        assert record.build == remote.build
        assert record.updater.version == "u7"

    def test_from_applied_keeps_previous_updater_when_remote_has_none(self) -> None:
        previous = LocalManifestRecord(updater=ComponentRecord(version="u1"))
        remote = ManifestDocument.model_validate({"build": BASE})
        record = LocalManifestRecord.from_applied("u", remote, previous)
        assert record.updater.version == "u1"

    def test_from_applied_keeps_previous_updater_when_remote_is_blank(self) -> None:
        previous = LocalManifestRecord(updater=ComponentRecord(version="u1"))
        remote = ManifestDocument.model_validate({"build": BASE, "updater": {}})
        record = LocalManifestRecord.from_applied("u", remote, previous)
        assert record.updater.version == "u1"


class TestDeclaredUpdater:
    @pytest.mark.parametrize(
        "updater", [None, {}, {"version": None, "url": " ", "sha256": ""}]
    )
    def test_absent_or_blank_section_is_none(self, updater: dict | None) -> None:
        remote = ManifestDocument.model_validate({"build": BASE, "updater": updater})
        assert remote.declared_updater() is None

    def test_populated_section_is_returned(self) -> None:
        remote = ManifestDocument.model_validate({"build": BASE, "updater": BASE})
        assert remote.declared_updater() == remote.updater


class TestMissingRemoteFieldError:
    def test_section_and_field_wording(self) -> None:
        assert "'build' section" in str(MissingRemoteFieldError("build"))
        assert "'updater.url' field" in str(MissingRemoteFieldError("updater.url"))
