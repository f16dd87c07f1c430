"""
Pydantic models for the remote manifest document and the persisted local record.

All "absent vs. null vs. blank" handling happens here, once, at parse time, so the
rest of the updater only ever sees plain (possibly empty) strings.
"""

from typing import Any

from pydantic import BaseModel, Field, field_validator

from build_updater.exceptions import MissingRemoteFieldError

COMPARED_FIELDS = ("version", "url", "sha256")


class ComponentRecord(BaseModel):
    """Desired state of one artifact: the updater itself or the application build."""

    version: str = ""
    url: str = ""
    sha256: str = ""

    class Config:
        """Pydantic model configuration."""

        frozen = True
        extra = "ignore"

    @field_validator("version", "url", "sha256", mode="before")
    @classmethod
    def blank_if_missing(cls, v: Any) -> str:
        """Coerces null to an empty string and trims surrounding whitespace."""
        if v is None:
            return ""
        return str(v).strip()

    @property
    def is_empty(self) -> bool:
        return not (self.version or self.url or self.sha256)


def needs_update(
    local: ComponentRecord | None, remote: ComponentRecord | None
) -> bool:
    """
    Returns True if the remote record differs from the local one on any of
    version, url or sha256 (trimmed string equality). Versions are opaque, so
    there is no notion of "older" or "newer" here.
    """
    if remote is None:
        return False
    local = local or ComponentRecord()
    return any(
        getattr(local, name).strip() != getattr(remote, name).strip()
        for name in COMPARED_FIELDS
    )


class ManifestDocument(BaseModel):
    """A manifest as fetched from the network. Sections may be missing."""

    manifest_url: str = Field(default="", alias="manifestUrl")
    build: ComponentRecord | None = None
    updater: ComponentRecord | None = None

    class Config:
        """Pydantic model configuration."""

        frozen = True
        extra = "ignore"
        populate_by_name = True

    @field_validator("manifest_url", mode="before")
    @classmethod
    def blank_url_if_missing(cls, v: Any) -> str:
        if v is None:
            return ""
        return str(v).strip()

    def require_build(self) -> ComponentRecord:
        """Returns the build section, which every usable manifest must carry."""
        if self.build is None:
            raise MissingRemoteFieldError("build")
        return self.build

    def declared_updater(self) -> ComponentRecord | None:
        """The updater section, or None when it is absent or entirely blank."""
        if self.updater is None or self.updater.is_empty:
            return None
        return self.updater

    def with_manifest_url(self, url: str) -> "ManifestDocument":
        return self.model_copy(update={"manifest_url": url.strip()})

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class LocalManifestRecord(ManifestDocument):
    """
    The last manifest state that was fully applied on this machine.

    Unlike a remote document, both sections are always present; a fresh install
    is simply the record with every field blank.
    """

    build: ComponentRecord = Field(default_factory=ComponentRecord)
    updater: ComponentRecord = Field(default_factory=ComponentRecord)

    @field_validator("build", "updater", mode="before")
    @classmethod
    def empty_if_missing(cls, v: Any) -> Any:
        return {} if v is None else v

    @classmethod
    def from_applied(
        cls,
        effective_url: str,
        remote: ManifestDocument,
        previous: "LocalManifestRecord",
    ) -> "LocalManifestRecord":
        """
        Builds the record to persist after a successful run. A remote manifest
        without an updater section (or with a blank one) leaves the previously
        applied updater state as is.
        """
        return cls(
            manifest_url=effective_url,
            build=remote.require_build(),
            updater=remote.declared_updater() or previous.updater,
        )
