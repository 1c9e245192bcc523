"""Sector-level access to boot media."""

from __future__ import annotations

import abc
from pathlib import Path

SECTOR_SIZE = 512

STA_NOINIT = 0x01
STA_NODISK = 0x02


class DiskError(Exception):
    """A sector read failed or no usable device is present."""


class DiscInterface(abc.ABC):
    """A block device that hands out whole sectors."""

    def startup(self) -> bool:
        """Bring the device up; return whether it is usable."""
        return True

    def is_inserted(self) -> bool:
        """Return whether media is present."""
        return True

    @abc.abstractmethod
    def read_sectors(self, sector: int, count: int) -> bytes:
        """Return ``count`` whole sectors starting at ``sector``."""

    def shutdown(self) -> bool:
        """Release the device; return whether that succeeded."""
        return True


class ImageDisc(DiscInterface):
    """A disc backed by an image file on the host filesystem."""

    def __init__(self, path, sector_size: int = SECTOR_SIZE) -> None:
        self.path = Path(path)
        self.sector_size = sector_size
        self._file = None

    def startup(self) -> bool:
        if self._file is None:
            try:
                self._file = open(self.path, "rb")
            except OSError:
                return False
        return True

    def is_inserted(self) -> bool:
        return self.path.is_file()

    def read_sectors(self, sector: int, count: int) -> bytes:
        if self._file is None:
            raise DiskError(f"{self.path} has not been started")
        if sector < 0 or count < 0:
            raise DiskError(f"invalid sector range {sector}+{count}")
        length = count * self.sector_size
        self._file.seek(sector * self.sector_size)
        data = self._file.read(length)
        if len(data) != length:
            raise DiskError(f"short read at sector {sector} of {self.path}")
        return data

    def shutdown(self) -> bool:
        if self._file is not None:
            self._file.close()
            self._file = None
        return True

    def __enter__(self) -> "ImageDisc":
        if not self.startup():
            raise DiskError(f"cannot open {self.path}")
        return self

    def __exit__(self, *exc_info) -> None:
        self.shutdown()


class MemoryDisc(DiscInterface):
    """A disc held entirely in memory."""

    def __init__(self, data, sector_size: int = SECTOR_SIZE) -> None:
        self.data = bytes(data)
        self.sector_size = sector_size

    def startup(self) -> bool:
        return True

    def is_inserted(self) -> bool:
        return True

    def read_sectors(self, sector: int, count: int) -> bytes:
        if sector < 0 or count < 0:
            raise DiskError(f"invalid sector range {sector}+{count}")
        start = sector * self.sector_size
        end = start + count * self.sector_size
        if end > len(self.data):
            raise DiskError(f"sector {sector}+{count} is beyond the end of the disc")
        return self.data[start:end]

    def shutdown(self) -> bool:
        return True


class SectorReader:
    """Partial reads from single 512-byte sectors of a device."""

    def __init__(self, device: DiscInterface | None) -> None:
        if device is None:
            raise DiskError("no device selected")
        self.device = device

    def read(self, sector: int, offset: int, count: int) -> bytes:
        """Return ``count`` bytes at ``offset`` within ``sector``."""
        if offset < 0 or count < 0 or offset + count > SECTOR_SIZE:
            raise ValueError(f"offset {offset} + count {count} exceeds a sector")
        block = self.device.read_sectors(sector, 1)
        if len(block) < offset + count:
            raise DiskError(f"sector {sector} is shorter than expected")
        return block[offset:offset + count]