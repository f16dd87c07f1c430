"""
Helper functions for formatting data into human-readable strings.
"""


def format_size(bytes_size: int) -> str:
    """Formats bytes into a human-readable size string (e.g., '145.3 MB')."""
    if bytes_size <= 0:
        return "0 B"
    size = float(bytes_size)
    for unit in ("B", "KB", "MB", "GB"):
        if size < 1024:
            return f"{size:.1f} {unit}"
        size /= 1024
    return f"{size:.1f} TB"


def format_duration(seconds: float) -> str:
    """Formats a run duration, e.g. '1m 05s' or '3.2s'."""
    if seconds < 60:
        return f"{seconds:.1f}s"
    minutes, secs = divmod(int(seconds), 60)
    return f"{minutes}m {secs:02d}s"


def short_digest(digest: str, length: int = 12) -> str:
    """Shortens a hex digest for log lines; blank digests render as '-'."""
    digest = (digest or "").strip()
    return digest[:length] if digest else "-"


def describe_version(version: str) -> str:
    """Renders an opaque version string, showing blanks explicitly."""
    return version or "<none>"
