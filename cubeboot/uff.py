"""Uniform file access for the boot loader on top of the FAT reader."""

from __future__ import annotations

from typing import Optional

from .diskio import DiscInterface
from .fat import FatError, FResult
from .petitfs import PetitFs

FA_READ = 0x01
FA_WRITE = 0x02
FA_OPEN_EXISTING = 0x00
FA_CREATE_NEW = 0x04
FA_CREATE_ALWAYS = 0x08
FA_OPEN_ALWAYS = 0x10
FA_OPEN_APPEND = 0x30


def path_fix(path: str) -> str:
    """Upper-case ASCII letters, as the reader matches names verbatim."""
    return "".join(chr(ord(c) - 0x20) if "a" <= c <= "z" else c for c in path)


class UnifiedFs:
    """Mount, open and read files on one device."""

    def __init__(self, device: Optional[DiscInterface] = None) -> None:
        self.device = device
        self._fs = PetitFs(device)

    @property
    def mounted(self) -> bool:
        return self._fs.volume is not None

    def mount(self) -> None:
        """Mount the volume on the device."""
        self._fs = PetitFs(self.device)
        self._fs.mount()

    def open(self, path: str) -> None:
        """Open ``path`` for reading."""
        self._fs.open(path)

    def read(self, count: int) -> bytes:
        """Read up to ``count`` bytes from the open file."""
        return self._fs.read(count)

    def write(self, data) -> int:
        """Writing is not supported; always fails."""
        raise FatError(FResult.DISK_ERR, "writing is not supported")

    def lseek(self, offset: int) -> int:
        """Move the read position of the open file."""
        return self._fs.lseek(offset)

    def size(self) -> int:
        """Return the size of the open file."""
        return self._fs.size()

    def unmount(self) -> None:
        """Forget the mounted volume and any open file."""
        self._fs = PetitFs(self.device)

    def __enter__(self) -> "UnifiedFs":
        self.mount()
        return self

    def __exit__(self, *exc_info) -> None:
        self.unmount()