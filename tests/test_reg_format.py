import pytest

from showtray.core import reg_format
from showtray.core.keys import ValueKind
from showtray.core.snapshot_models import Snapshot, SnapshotEntry, Tier

REGEDIT_EXPORT = r"""Windows Registry Editor Version 5.00

; showtray tier: basic
; showtray created_at: 2026-01-02T03:04:05
; showtray host: DESK

[HKEY_CURRENT_USER\Software\Microsoft\Windows\CurrentVersion\Explorer]
"EnableAutoTray"=dword:00000001
"Weird \"Name\""=-

[HKEY_CURRENT_USER\Software\Classes\Local Settings\Software\Microsoft\Windows\CurrentVersion\TrayNotify]
"IconStreams"=hex:14,00,00,00,07,00,00,00,01,00,01,00,02,00,00,00,0e,00,00,00,\
  ff,ff
"""


def test_parses_regedit_export():
    snapshot = reg_format.loads(REGEDIT_EXPORT)

    assert snapshot.tier is Tier.BASIC
    assert snapshot.created_at == "2026-01-02T03:04:05"
    assert snapshot.host == "DESK"
    assert [(e.name, e.data) for e in snapshot.entries] == [
        ("EnableAutoTray", 1),
        ('Weird "Name"', None),
        ("IconStreams", bytes.fromhex("140000000700000001000100020000000e000000ffff")),
    ]
    assert snapshot.entries[2].kind is ValueKind.BINARY
    assert snapshot.entries[0].path == r"Software\Microsoft\Windows\CurrentVersion\Explorer"


def test_long_binary_values_wrap_and_parse_back():
    data = bytes(range(200))
    snapshot = Snapshot.create(
        Tier.BASIC,
        [SnapshotEntry("Software\\Test", "Blob", ValueKind.BINARY, data)],
    )

    text = reg_format.dumps(snapshot)

    assert all(len(line) <= 80 for line in text.splitlines())
    assert reg_format.loads(text).entries[0].data == data


def test_decode_accepts_utf8_and_utf16():
    assert reg_format.decode(REGEDIT_EXPORT.encode("utf-16")) == REGEDIT_EXPORT
    assert reg_format.decode(b"\xef\xbb\xbf" + REGEDIT_EXPORT.encode("utf-8")) == REGEDIT_EXPORT


@pytest.mark.parametrize(
    "text",
    [
        "not a reg file",
        'Windows Registry Editor Version 5.00\n"EnableAutoTray"=dword:0\n',
        "Windows Registry Editor Version 5.00\n[HKEY_LOCAL_MACHINE\\Software]\n",
        'Windows Registry Editor Version 5.00\n[HKEY_CURRENT_USER\\X]\n"A"=hex(2):00\n',
        'Windows Registry Editor Version 5.00\n[HKEY_CURRENT_USER\\X]\n"A"=dword:zz\n',
    ],
)
def test_rejects_malformed_text(text):
    with pytest.raises(ValueError):
        reg_format.loads(text)
