"""Board configuration documents.

The configuration groups the radio, video and floppy controller settings the
firmware reads at boot::

    wifi:
      country: US
      ssid: workshop
      password: secret
    video:
      system: pal
      address: 0xE000
    fdc:
      enabled: true
      disk0:
        file: boot.imd
        ro: true

Later keys and later documents overwrite earlier values.
"""

from __future__ import annotations

import struct
from dataclasses import dataclass, field
from enum import Enum, auto
from pathlib import Path
from typing import Callable, Dict, List, Optional, TextIO, Union

from pymemcfg.errors import ConfigError, ScanError
from pymemcfg.utils import debug_log, scan

from .events import Event, EventKind
from .machine import EventStateMachine

COUNTRY_CODE_SIZE = 4
SSID_SIZE = 32
PASSWORD_SIZE = 64
FILE_NAME_SIZE = 64
MAX_DRIVES = 4

_HEADER = struct.Struct(f"<{COUNTRY_CODE_SIZE}s{SSID_SIZE}s{PASSWORD_SIZE}sHHBBHH")
_DISK = struct.Struct(f"<{FILE_NAME_SIZE}sB")
PACKED_SIZE = _HEADER.size + MAX_DRIVES * _DISK.size


def _truncate(text: str, size: int) -> str:
    return text[: size - 1]


def _pack_string(text: str, size: int) -> bytes:
    return text.encode("utf-8")[: size - 1]


@dataclass
class RadioConfig:
    country: str = ""
    ssid: str = ""
    password: str = ""


@dataclass
class VideoConfig:
    system: int = 0
    address: int = 0


@dataclass
class DiskSlot:
    file: str = ""
    readonly: bool = False


@dataclass
class FloppyConfig:
    enabled: bool = False
    optswitch: bool = False
    usrram: int = 0
    sysram: int = 0
    disks: List[DiskSlot] = field(default_factory=lambda: [DiskSlot() for _ in range(MAX_DRIVES)])


@dataclass
class BoardConfig:
    """Settings stored in the configuration sector of the board flash."""

    wifi: RadioConfig = field(default_factory=RadioConfig)
    video: VideoConfig = field(default_factory=VideoConfig)
    fdc: FloppyConfig = field(default_factory=FloppyConfig)

    def pack(self) -> bytes:
        """Return the little-endian record layout read by the firmware."""

        packed = bytearray(
            _HEADER.pack(
                _pack_string(self.wifi.country, COUNTRY_CODE_SIZE),
                _pack_string(self.wifi.ssid, SSID_SIZE),
                _pack_string(self.wifi.password, PASSWORD_SIZE),
                self.video.system,
                self.video.address,
                int(self.fdc.enabled),
                int(self.fdc.optswitch),
                self.fdc.usrram,
                self.fdc.sysram,
            )
        )
        for disk in self.fdc.disks:
            packed += _DISK.pack(_pack_string(disk.file, FILE_NAME_SIZE), int(disk.readonly))
        return bytes(packed)


class ConfigState(Enum):
    START = auto()
    STREAM = auto()
    DOCUMENT = auto()
    SECTION = auto()
    WIFI_SECTION = auto()
    WIFI_DATA = auto()
    WIFI_COUNTRY = auto()
    WIFI_SSID = auto()
    WIFI_PASSWORD = auto()
    VIDEO_SECTION = auto()
    VIDEO_DATA = auto()
    VIDEO_SYSTEM = auto()
    VIDEO_ADDRESS = auto()
    FDC_SECTION = auto()
    FDC_DATA = auto()
    FDC_ENABLED = auto()
    FDC_USRRAM = auto()
    FDC_SYSRAM = auto()
    FDC_OPTSWITCH = auto()
    DISK_SECTION = auto()
    DISK_DATA = auto()
    DISK_FILE = auto()
    DISK_RO = auto()
    STOP = auto()


S = ConfigState

# Each mapping state lists its keys and unknown-key label, plus the state
# restored when the mapping closes.
_MAPPINGS: Dict[ConfigState, tuple] = {
    S.SECTION: ({"wifi": S.WIFI_SECTION, "video": S.VIDEO_SECTION, "fdc": S.FDC_SECTION}, "section", S.DOCUMENT),
    S.WIFI_DATA: (
        {"country": S.WIFI_COUNTRY, "ssid": S.WIFI_SSID, "password": S.WIFI_PASSWORD},
        "wifi parameter",
        S.SECTION,
    ),
    S.VIDEO_DATA: ({"system": S.VIDEO_SYSTEM, "address": S.VIDEO_ADDRESS}, "video parameter", S.SECTION),
    S.FDC_DATA: (
        {
            "enabled": S.FDC_ENABLED,
            "usrram": S.FDC_USRRAM,
            "sysram": S.FDC_SYSRAM,
            "optswitch": S.FDC_OPTSWITCH,
            **{f"disk{index}": S.DISK_SECTION for index in range(MAX_DRIVES)},
        },
        "fdc parameter",
        S.SECTION,
    ),
    S.DISK_DATA: ({"file": S.DISK_FILE, "ro": S.DISK_RO}, "disk parameter", S.FDC_DATA),
}

_OPENINGS: Dict[ConfigState, ConfigState] = {
    S.WIFI_SECTION: S.WIFI_DATA,
    S.VIDEO_SECTION: S.VIDEO_DATA,
    S.FDC_SECTION: S.FDC_DATA,
    S.DISK_SECTION: S.DISK_DATA,
}


class ConfigParser(EventStateMachine):
    """Fill a :class:`BoardConfig` from the YAML events of a config document."""

    error_class = ConfigError
    document_name = "config"
    start_state = S.START
    stop_state = S.STOP

    def __init__(self, config: Optional[BoardConfig] = None) -> None:
        self.config = config if config is not None else BoardConfig()
        self.disk = 0
        super().__init__()

    def transitions(self):
        table = {
            (S.START, EventKind.STREAM_START): lambda event: S.STREAM,
            (S.STREAM, EventKind.DOCUMENT_START): lambda event: S.DOCUMENT,
            (S.STREAM, EventKind.STREAM_END): lambda event: S.STOP,
            (S.DOCUMENT, EventKind.MAPPING_START): lambda event: S.SECTION,
            (S.DOCUMENT, EventKind.DOCUMENT_END): lambda event: S.STREAM,
        }
        for state, (keys, label, parent) in _MAPPINGS.items():
            table[(state, EventKind.SCALAR)] = self._key_handler(keys, label)
            table[(state, EventKind.MAPPING_END)] = self._return_to(parent)
        for state, inner in _OPENINGS.items():
            table[(state, EventKind.MAPPING_START)] = self._return_to(inner)

        stores: Dict[ConfigState, tuple] = {
            S.WIFI_COUNTRY: (self._store_country, S.WIFI_DATA),
            S.WIFI_SSID: (self._store_ssid, S.WIFI_DATA),
            S.WIFI_PASSWORD: (self._store_password, S.WIFI_DATA),
            S.VIDEO_SYSTEM: (self._store_system, S.VIDEO_DATA),
            S.VIDEO_ADDRESS: (self._store_address, S.VIDEO_DATA),
            S.FDC_ENABLED: (self._store_fdc_enabled, S.FDC_DATA),
            S.FDC_USRRAM: (self._store_usrram, S.FDC_DATA),
            S.FDC_SYSRAM: (self._store_sysram, S.FDC_DATA),
            S.FDC_OPTSWITCH: (self._store_optswitch, S.FDC_DATA),
            S.DISK_FILE: (self._store_disk_file, S.DISK_DATA),
            S.DISK_RO: (self._store_disk_ro, S.DISK_DATA),
        }
        for state, (store, parent) in stores.items():
            table[(state, EventKind.SCALAR)] = self._value_handler(store, parent)
        return table

    @staticmethod
    def _return_to(state: ConfigState):
        return lambda event: state

    def _key_handler(self, keys: Dict[str, ConfigState], label: str):
        def handle(event: Event) -> ConfigState:
            key = event.value or ""
            state = keys.get(key)
            if state is None:
                raise ConfigError(f"Unexpected {label}: {key}")
            if state is S.DISK_SECTION:
                self.disk = int(key[len("disk"):])
            return state

        return handle

    def _value_handler(self, store: Callable[[str], None], parent: ConfigState):
        def handle(event: Event) -> ConfigState:
            store(event.value or "")
            return parent

        return handle

    @staticmethod
    def _convert(convert: Callable[[str], object], text: str, what: str):
        try:
            return convert(text)
        except ScanError:
            raise ConfigError(f"Invalid {what}: {text}") from None

    def _store_country(self, text: str) -> None:
        self.config.wifi.country = self._convert(scan.country_code, text, "country code")

    def _store_ssid(self, text: str) -> None:
        if not text:
            raise ConfigError("SSID must not be blank")
        self.config.wifi.ssid = _truncate(text, SSID_SIZE)

    def _store_password(self, text: str) -> None:
        self.config.wifi.password = _truncate(text, PASSWORD_SIZE)

    def _store_system(self, text: str) -> None:
        self.config.video.system = self._convert(scan.video_system, text, "video system")

    def _store_address(self, text: str) -> None:
        self.config.video.address = self._convert(scan.uint16, text, "video memory address")

    def _store_fdc_enabled(self, text: str) -> None:
        self.config.fdc.enabled = self._convert(scan.boolean, text, "boolean value for 'enabled'")

    def _store_usrram(self, text: str) -> None:
        self.config.fdc.usrram = self._convert(scan.uint16, text, "user memory address")

    def _store_sysram(self, text: str) -> None:
        self.config.fdc.sysram = self._convert(scan.uint16, text, "system memory address")

    def _store_optswitch(self, text: str) -> None:
        self.config.fdc.optswitch = self._convert(scan.boolean, text, "boolean value for 'optswitch'")

    def _store_disk_file(self, text: str) -> None:
        self.config.fdc.disks[self.disk].file = _truncate(text, FILE_NAME_SIZE)

    def _store_disk_ro(self, text: str) -> None:
        self.config.fdc.disks[self.disk].readonly = self._convert(scan.boolean, text, "boolean value for 'ro'")


def parse_config(stream: Union[str, TextIO], config: Optional[BoardConfig] = None) -> BoardConfig:
    """Apply the documents of ``stream`` to ``config`` (a fresh one by default)."""

    parser = ConfigParser(config)
    parser.parse(stream)
    debug_log("config", "parsed config for country %r ssid %r", parser.config.wifi.country, parser.config.wifi.ssid)
    return parser.config


def parse_config_file(path: Union[str, Path], config: Optional[BoardConfig] = None) -> BoardConfig:
    path = Path(path)
    try:
        with path.open("r", encoding="utf-8") as handle:
            return parse_config(handle, config)
    except OSError as exc:
        raise ConfigError(f"Can't open config file: {exc}") from exc
