"""Project-wide constants (default ports, identifier widths, timeouts)."""

DEFAULT_MASTER_PORT: int = 9333
DEFAULT_TIMEOUT_SECONDS: float = 30.0

COOKIE_HEX_WIDTH: int = 2  # cookie is rendered as one zero-padded hex byte
MAX_PORT: int = 65535

ASSIGN_ENDPOINT = "/dir/assign"
LOOKUP_ENDPOINT = "/dir/lookup"

DEFAULT_UPLOAD_FIELD = "file"
DEFAULT_UPLOAD_FILENAME = "file"
DEFAULT_CONTENT_TYPE = "application/octet-stream"
