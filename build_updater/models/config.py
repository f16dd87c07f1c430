"""
Pydantic model for the updater's run configuration.

A single UpdaterConfig is built at startup and handed to every component; the
on-disk layout under the installation root is derived from it.
"""

from pathlib import Path

from pydantic import BaseModel, Field, field_validator, model_validator

DEFAULT_AUXILIARY_MARKERS = ["crash", "launcher", "updater", "unins"]

LOG_DIR_NAME = "Log"
LOG_FILE_NAME = "updater.log"
BUILD_DIR_NAME = "Build"
STAGING_DIR_NAME = "Build_new"
PREVIOUS_DIR_NAME = "Build_old"
SCRATCH_DIR_NAME = "_update_tmp"
STATE_FILE_NAME = "manifest.local.json"
CONFIG_FILE_NAME = "updater.ini"


class UpdaterConfig(BaseModel):
    """A validated configuration model for one updater run."""

    manifest_url: str
    install_root: Path
    self_path: Path

    # Build handling
    keep_previous_build: bool = True
    launch: bool = True
    auxiliary_markers: list[str] = Field(
        default_factory=lambda: list(DEFAULT_AUXILIARY_MARKERS)
    )

    # Transfer settings
    download_attempts: int = 3
    retry_base_delay: float = 1.5
    connect_timeout: float = 15.0
    read_timeout: float = 90.0

    class Config:
        """Pydantic model configuration."""

        validate_assignment = True
        str_strip_whitespace = True

    @field_validator("manifest_url")
    @classmethod
    def validate_manifest_url(cls, v: str) -> str:
        """Only http(s) manifests are supported."""
        if not v.lower().startswith(("http://", "https://")):
            raise ValueError(f"Manifest URL must be http(s), got: {v!r}")
        return v

    @field_validator("download_attempts")
    @classmethod
    def validate_attempts(cls, v: int) -> int:
        if v < 1 or v > 10:
            raise ValueError("Download attempts must be between 1 and 10.")
        return v

    @field_validator("retry_base_delay", "connect_timeout", "read_timeout")
    @classmethod
    def validate_non_negative(cls, v: float) -> float:
        if v < 0:
            raise ValueError("Delays and timeouts cannot be negative.")
        return v

    @field_validator("auxiliary_markers")
    @classmethod
    def normalize_markers(cls, v: list[str]) -> list[str]:
        return [m.strip().lower() for m in v if m.strip()]

    @model_validator(mode="after")
    def resolve_paths(self) -> "UpdaterConfig":
        """Anchors a relative self path under the installation root."""
        if not self.self_path.is_absolute():
            # Bypass validate_assignment to avoid re-running this validator.
            self.__dict__["self_path"] = self.install_root / self.self_path
        return self

    # On-disk layout
    @property
    def log_dir(self) -> Path:
        return self.install_root / LOG_DIR_NAME

    @property
    def history_path(self) -> Path:
        return self.log_dir / "run_history.jsonl"

    @property
    def build_dir(self) -> Path:
        return self.install_root / BUILD_DIR_NAME

    @property
    def staging_dir(self) -> Path:
        return self.install_root / STAGING_DIR_NAME

    @property
    def previous_dir(self) -> Path:
        return self.install_root / PREVIOUS_DIR_NAME

    @property
    def scratch_dir(self) -> Path:
        return self.install_root / SCRATCH_DIR_NAME

    @property
    def state_path(self) -> Path:
        return self.install_root / STATE_FILE_NAME

    @classmethod
    def get_ini_keys(cls) -> set[str]:
        """Returns the settings that may be supplied through updater.ini."""
        internal_fields = {"manifest_url", "install_root"}
        return {key for key in cls.model_fields if key not in internal_fields}
