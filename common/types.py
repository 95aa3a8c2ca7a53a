"""Shared value types (FID, Location, ReplicationType, TTL) and their text forms."""

import re
from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional

from common.constants import COOKIE_HEX_WIDTH, MAX_PORT
from common.exceptions import MalformedAddress, MalformedIdentifier

MAX_VOLUME_ID = 2 ** 32 - 1
MAX_FILE_KEY = 2 ** 64 - 1
MAX_COOKIE = 16 ** COOKIE_HEX_WIDTH - 1

_DECIMAL = re.compile(r"0|[1-9][0-9]*")
_LOWER_HEX = re.compile(r"[0-9a-f]*")
_DIGITS = re.compile(r"[0-9]+")
_HOST_FORBIDDEN = re.compile(r"[/?#@\s]")


@dataclass(frozen=True)
class FID:
    """
    File id of a stored blob: volume id, file key and cookie.

    The optional delta selects the n-th id of a batch assignment
    and is rendered as a ``_<delta>`` suffix.
    """
    volume_id: int
    file_key: int
    cookie: int
    delta: Optional[int] = None

    def __post_init__(self):
        if not 0 <= self.volume_id <= MAX_VOLUME_ID:
            raise MalformedIdentifier(f"Volume id out of range: {self.volume_id}")
        if not 0 <= self.file_key <= MAX_FILE_KEY:
            raise MalformedIdentifier(f"File key out of range: {self.file_key}")
        if not 0 <= self.cookie <= MAX_COOKIE:
            raise MalformedIdentifier(f"Cookie out of range: {self.cookie}")
        if self.delta is not None and self.delta < 0:
            raise MalformedIdentifier(f"Negative delta: {self.delta}")

    @classmethod
    def from_string(cls, text: str) -> 'FID':
        """Parse a textual file id."""
        return parse_fid(text)

    def with_delta(self, delta: Optional[int]) -> 'FID':
        """Return a copy addressing the given id of the same batch."""
        return replace(self, delta=delta)

    def to_string(self) -> str:
        return format_fid(self)

    def __str__(self) -> str:
        return format_fid(self)


def _key_to_hex(file_key: int) -> str:
    if file_key == 0:
        return ""
    key_hex = f"{file_key:x}"
    if len(key_hex) % 2:
        key_hex = "0" + key_hex
    return key_hex


def format_fid(fid: FID) -> str:
    """
    Render a file id as ``<volume>,<key-hex><cookie-hex>[_<delta>]``.

    The key is written as whole bytes with leading zero bytes stripped;
    the cookie is always zero-padded to COOKIE_HEX_WIDTH lowercase digits.
    """
    text = f"{fid.volume_id},{_key_to_hex(fid.file_key)}{fid.cookie:0{COOKIE_HEX_WIDTH}x}"
    if fid.delta is not None:
        text = f"{text}_{fid.delta}"
    return text


def parse_fid(text: str) -> FID:
    """
    Parse the textual form produced by format_fid or returned by the master.

    Args:
        text: File id string (e.g. "3,01637037d6" or "3,01637037d6_1")

    Returns:
        Parsed FID

    Raises:
        MalformedIdentifier: If the text is not a canonical file id
    """
    if not text:
        raise MalformedIdentifier("Empty file id")

    volume_part, sep, remainder = text.partition(",")
    if not sep:
        raise MalformedIdentifier(f"Missing ',' in file id: {text!r}")
    if not _DECIMAL.fullmatch(volume_part):
        raise MalformedIdentifier(f"Invalid volume id in file id: {text!r}")

    key_cookie, sep, delta_part = remainder.partition("_")
    delta = None
    if sep:
        if not _DECIMAL.fullmatch(delta_part):
            raise MalformedIdentifier(f"Invalid delta in file id: {text!r}")
        delta = int(delta_part)

    if len(key_cookie) < COOKIE_HEX_WIDTH:
        raise MalformedIdentifier(
            f"File id {text!r} is shorter than the {COOKIE_HEX_WIDTH}-digit cookie"
        )

    key_hex = key_cookie[:-COOKIE_HEX_WIDTH]
    cookie_hex = key_cookie[-COOKIE_HEX_WIDTH:]

    if not _LOWER_HEX.fullmatch(cookie_hex):
        raise MalformedIdentifier(f"Cookie is not lowercase hex in file id: {text!r}")
    if not _LOWER_HEX.fullmatch(key_hex):
        raise MalformedIdentifier(f"File key is not lowercase hex in file id: {text!r}")
    if len(key_hex) % 2 or key_hex.startswith("00"):
        raise MalformedIdentifier(f"File key is not in canonical byte form: {text!r}")

    return FID(
        volume_id=int(volume_part),
        file_key=int(key_hex, 16) if key_hex else 0,
        cookie=int(cookie_hex, 16),
        delta=delta,
    )


@dataclass(frozen=True)
class Location:
    """
    Address of a volume server holding a file id.
    """
    url: str
    public_url: Optional[str] = None

    @property
    def external_url(self) -> str:
        """Externally reachable address, falling back to the internal one."""
        return self.public_url or self.url


def parse_address(text: str, default_scheme: str = "http") -> tuple[str, str, int]:
    """
    Split a server address into scheme, host and port.

    Args:
        text: Address like "localhost:8080" or "http://10.0.0.5:8080"
        default_scheme: Scheme used when the address carries none

    Returns:
        Tuple of (scheme, host, port)

    Raises:
        MalformedAddress: If the host or a numeric port is missing
    """
    value = (text or "").strip()
    scheme = default_scheme
    for prefix in ("http://", "https://"):
        if value.lower().startswith(prefix):
            scheme = prefix[:-3]
            value = value[len(prefix):]
            break
    value = value.rstrip("/")

    host, sep, port_text = value.rpartition(":")
    if not sep:
        raise MalformedAddress(f"Missing port in address: {text!r} (expected host:port)")
    if not host:
        raise MalformedAddress(f"Missing host in address: {text!r}")
    if _HOST_FORBIDDEN.search(host):
        raise MalformedAddress(f"Invalid host in address: {text!r}")
    if not _DIGITS.fullmatch(port_text):
        raise MalformedAddress(f"Non-numeric port in address: {text!r}")

    port = int(port_text)
    if port > MAX_PORT:
        raise MalformedAddress(f"Port out of range in address: {text!r}")

    return scheme, host, port


@dataclass(frozen=True)
class ReplicationType:
    """
    Replica placement, rendered as three digits: other data centers,
    other racks in the same data center, other servers in the same rack.
    """
    data_center: int = 0
    other_rack: int = 0
    same_rack: int = 0

    def __post_init__(self):
        for name in ("data_center", "other_rack", "same_rack"):
            value = getattr(self, name)
            if not 0 <= value <= 2:
                raise ValueError(f"Replication {name} must be between 0 and 2, got {value}")

    @classmethod
    def from_string(cls, text: str) -> 'ReplicationType':
        if len(text) != 3 or not text.isdigit():
            raise ValueError(f"Replication must be three digits, got {text!r}")
        return cls(int(text[0]), int(text[1]), int(text[2]))

    def __str__(self) -> str:
        return f"{self.data_center}{self.other_rack}{self.same_rack}"


class TTLUnit(str, Enum):
    MINUTE = "m"
    HOUR = "h"
    DAY = "d"
    WEEK = "w"
    MONTH = "M"
    YEAR = "y"


@dataclass(frozen=True)
class TTL:
    """Time to live of an assigned file id, e.g. TTL(3, TTLUnit.DAY) -> "3d"."""
    value: int
    unit: TTLUnit = TTLUnit.MINUTE

    def __post_init__(self):
        if not 1 <= self.value <= 255:
            raise ValueError(f"TTL value must be between 1 and 255, got {self.value}")

    @classmethod
    def from_string(cls, text: str) -> 'TTL':
        if len(text) < 2 or not text[:-1].isdigit():
            raise ValueError(f"Invalid TTL: {text!r}")
        return cls(int(text[:-1]), TTLUnit(text[-1]))

    def __str__(self) -> str:
        return f"{self.value}{self.unit.value}"
