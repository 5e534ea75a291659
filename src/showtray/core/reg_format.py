"""Registry-export (.reg) text format for the basic snapshot tier.

The output is importable with regedit. Values recorded as absent use the
deletion syntax ``"Name"=-`` so that importing the file restores the
default state too. Snapshot metadata is kept in ``;`` comment lines.
"""

from __future__ import annotations

import codecs
import re

from .keys import ValueKind
from .snapshot_models import Snapshot, SnapshotEntry, Tier

HEADER = "Windows Registry Editor Version 5.00"
LEGACY_HEADER = "REGEDIT4"
HIVE = "HKEY_CURRENT_USER"
_HIVE_ALIASES = ("HKEY_CURRENT_USER", "HKCU")
_META_PREFIX = "; showtray "
_META_FIELDS = ("tier", "created_at", "tool_version", "host", "user")

_VALUE_LINE = re.compile(r'^"((?:[^"\\]|\\.)*)"=(.*)$')
_HEX_LINE_WIDTH = 76


def _quote(name: str) -> str:
    return '"' + name.replace("\\", "\\\\").replace('"', '\\"') + '"'


def _unquote(name: str) -> str:
    return re.sub(r"\\(.)", r"\1", name)


def _format_hex(prefix: str, data: bytes) -> list[str]:
    """regedit-style hex value wrapped with trailing backslashes."""
    if not data:
        return [prefix + "hex:"]
    lines = []
    current = prefix + "hex:"
    octets = [f"{b:02x}" for b in data]
    for i, octet in enumerate(octets):
        piece = octet + ("," if i < len(octets) - 1 else "")
        if len(current) + len(piece) > _HEX_LINE_WIDTH:
            lines.append(current + "\\")
            current = "  "
        current += piece
    lines.append(current)
    return lines


def dumps(snapshot: Snapshot) -> str:
    lines = [HEADER, ""]
    lines.append(f"{_META_PREFIX}tier: {snapshot.tier.value}")
    lines.append(f"{_META_PREFIX}created_at: {snapshot.created_at}")
    lines.append(f"{_META_PREFIX}tool_version: {snapshot.tool_version}")
    lines.append(f"{_META_PREFIX}host: {snapshot.host}")
    lines.append(f"{_META_PREFIX}user: {snapshot.user}")

    sections: dict[str, list[SnapshotEntry]] = {}
    for entry in snapshot.entries:
        sections.setdefault(entry.path, []).append(entry)

    for path, entries in sections.items():
        lines.append("")
        lines.append(f"[{HIVE}\\{path}]")
        for entry in entries:
            prefix = _quote(entry.name) + "="
            if entry.data is None:
                lines.append(prefix + "-")
            elif entry.kind is ValueKind.DWORD:
                lines.append(prefix + f"dword:{entry.data:08x}")
            else:
                lines.extend(_format_hex(prefix, bytes(entry.data)))

    lines.append("")
    # regedit expects CRLF line endings
    return "\r\n".join(lines) + "\r\n"


def encode(snapshot: Snapshot) -> bytes:
    """UTF-16 with BOM, the encoding ``reg export`` produces."""
    return codecs.BOM_UTF16_LE + dumps(snapshot).encode("utf-16-le")


def decode(raw: bytes) -> str:
    if raw.startswith(codecs.BOM_UTF16_LE) or raw.startswith(codecs.BOM_UTF16_BE):
        return raw.decode("utf-16")
    return raw.decode("utf-8-sig")


def _logical_lines(text: str):
    """Yield lines with backslash continuations joined."""
    pending = ""
    for raw_line in text.splitlines():
        line = raw_line.strip()
        if pending:
            line = pending + line
            pending = ""
        if line.endswith("\\") and not line.startswith("["):
            pending = line[:-1]
            continue
        yield line
    if pending:
        yield pending


def _parse_data(name: str, data: str) -> tuple[ValueKind, int | bytes | None]:
    if data == "-":
        return ValueKind.DWORD, None
    if data.lower().startswith("dword:"):
        digits = data[len("dword:"):]
        if not re.fullmatch(r"[0-9a-fA-F]{1,8}", digits):
            raise ValueError(f"{name}: invalid dword {digits!r}")
        return ValueKind.DWORD, int(digits, 16)
    if data.lower().startswith("hex:"):
        body = data[len("hex:"):].replace(" ", "")
        if not body:
            return ValueKind.BINARY, b""
        try:
            return ValueKind.BINARY, bytes(int(octet, 16) for octet in body.split(","))
        except ValueError as e:
            raise ValueError(f"{name}: invalid hex data") from e
    raise ValueError(f"{name}: unsupported value type {data.split(':', 1)[0]!r}")


def loads(text: str) -> Snapshot:
    """Parse .reg text into a Snapshot. Raises ValueError on malformed input."""
    lines = iter(_logical_lines(text))
    header = next((line for line in lines if line), "")
    if header not in (HEADER, LEGACY_HEADER):
        raise ValueError(f"not a registry export (header {header[:40]!r})")

    meta: dict[str, str] = {}
    entries: list[SnapshotEntry] = []
    path = None

    for line in lines:
        if not line:
            continue
        if line.startswith(";"):
            if line.startswith(_META_PREFIX) and ":" in line:
                field_name, _, value = line[len(_META_PREFIX):].partition(":")
                if field_name.strip() in _META_FIELDS:
                    meta[field_name.strip()] = value.strip()
            continue
        if line.startswith("["):
            if not line.endswith("]") or line.startswith("[-"):
                raise ValueError(f"unsupported key line {line!r}")
            hive, _, path = line[1:-1].partition("\\")
            if hive.upper() not in _HIVE_ALIASES or not path:
                raise ValueError(f"key outside HKEY_CURRENT_USER: {line!r}")
            continue

        match = _VALUE_LINE.match(line)
        if not match:
            raise ValueError(f"unrecognised line {line!r}")
        if path is None:
            raise ValueError("value line before any key")
        name = _unquote(match.group(1))
        kind, data = _parse_data(name, match.group(2).strip())
        entries.append(SnapshotEntry(path=path, name=name, kind=kind, data=data))

    try:
        tier = Tier(meta.get("tier", Tier.BASIC.value))
    except ValueError as e:
        raise ValueError(f"invalid tier {meta.get('tier')!r}") from e

    return Snapshot(
        tier=tier,
        entries=entries,
        created_at=meta.get("created_at", ""),
        tool_version=meta.get("tool_version", ""),
        host=meta.get("host", ""),
        user=meta.get("user", ""),
    )
