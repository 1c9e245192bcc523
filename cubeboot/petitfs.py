"""A small read-only FAT filesystem with one open file at a time."""

from __future__ import annotations

from typing import Iterator, List, Optional

from .diskio import SECTOR_SIZE, DiscInterface, DiskError, SectorReader
from .directory import DirCursor, follow_path
from .fat import FatError, FileInfo, FResult, Volume


class PetitFs:
    """Mount a FAT volume on ``device`` and read files from it."""

    def __init__(self, device: Optional[DiscInterface] = None) -> None:
        self.device = device
        self.volume: Optional[Volume] = None
        self._opened = False
        self._fsize = 0
        self._fptr = 0
        self._org_clust = 0
        self._curr_clust = 0
        self._dsect = 0

    def mount(self) -> Volume:
        """Find and mount the FAT volume on the device."""
        self.volume = None
        self._opened = False
        try:
            reader = SectorReader(self.device)
        except DiskError as exc:
            raise FatError(FResult.NOT_READY, "drive is not ready") from exc
        self.volume = Volume.from_disk(reader)
        return self.volume

    def _require_volume(self) -> Volume:
        if self.volume is None:
            raise FatError(FResult.NOT_ENABLED, "no volume mounted")
        return self.volume

    def _require_open(self) -> Volume:
        volume = self._require_volume()
        if not self._opened:
            raise FatError(FResult.NOT_OPENED, "no file is open")
        return volume

    def open(self, path: str) -> None:
        """Open the file at ``path``; it becomes the current file."""
        volume = self._require_volume()
        self._opened = False
        _, entry = follow_path(volume, path)
        if entry is None or entry.is_dir:
            raise FatError(FResult.NO_FILE, f"{path} is not a file")
        self._org_clust = volume.cluster_of(entry)
        self._fsize = entry.file_size
        self._fptr = 0
        self._opened = True

    def size(self) -> int:
        """Return the size of the current file."""
        self._require_volume()
        return self._fsize

    def read(self, count: int) -> bytes:
        """Read up to ``count`` bytes from the current file position."""
        volume = self._require_open()
        if count < 0:
            raise ValueError("count must not be negative")
        count = min(count, self._fsize - self._fptr)
        out = bytearray()
        try:
            while count:
                offset = self._fptr % SECTOR_SIZE
                if offset == 0:
                    cs = (self._fptr // SECTOR_SIZE) & (volume.csize - 1)
                    if not cs:
                        if self._fptr == 0:
                            clst = self._org_clust
                        else:
                            clst = volume.get_fat(self._curr_clust)
                        if clst <= 1:
                            raise FatError(FResult.DISK_ERR, "broken cluster chain")
                        self._curr_clust = clst
                    self._dsect = volume.clust2sect(self._curr_clust) + cs
                rcnt = min(SECTOR_SIZE - offset, count)
                out += volume.reader.read(self._dsect, offset, rcnt)
                self._fptr += rcnt
                count -= rcnt
        except (FatError, DiskError) as exc:
            self._opened = False
            raise FatError(FResult.DISK_ERR, str(exc)) from exc
        return bytes(out)

    def lseek(self, offset: int) -> int:
        """Move the file position to ``offset``, clipped to the file size."""
        volume = self._require_open()
        if offset < 0:
            raise ValueError("offset must not be negative")
        ofs = min(offset, self._fsize)
        ifptr = self._fptr
        self._fptr = 0
        if ofs > 0:
            bcs = volume.csize * SECTOR_SIZE
            try:
                if ifptr > 0 and (ofs - 1) // bcs >= (ifptr - 1) // bcs:
                    self._fptr = (ifptr - 1) & ~(bcs - 1)
                    ofs -= self._fptr
                    clst = self._curr_clust
                else:
                    clst = self._org_clust
                    self._curr_clust = clst
                while ofs > bcs:
                    clst = volume.get_fat(clst)
                    if clst <= 1 or clst >= volume.n_fatent:
                        raise FatError(FResult.DISK_ERR, "broken cluster chain")
                    self._curr_clust = clst
                    self._fptr += bcs
                    ofs -= bcs
                self._fptr += ofs
                sect = volume.clust2sect(clst)
            except (FatError, DiskError) as exc:
                self._opened = False
                raise FatError(FResult.DISK_ERR, str(exc)) from exc
            self._dsect = sect + ((self._fptr // SECTOR_SIZE) & (volume.csize - 1))
        return self._fptr

    def opendir(self, path: str) -> DirCursor:
        """Return a cursor on the first entry of the directory at ``path``."""
        volume = self._require_volume()
        cursor, entry = follow_path(volume, path)
        if entry is not None:
            if not entry.is_dir:
                raise FatError(FResult.NO_FILE, f"{path} is not a directory")
            cursor.sclust = volume.cluster_of(entry)
        cursor.rewind()
        return cursor

    def readdir(self, cursor: DirCursor) -> Optional[FileInfo]:
        """Return the next item of an open directory, or None at its end."""
        self._require_volume()
        entry = cursor.read_entry()
        if entry is None:
            return None
        info = entry.to_file_info()
        try:
            if not cursor.advance():
                cursor.sect = 0
        except FatError:
            cursor.sect = 0
            raise
        return info

    def _iterdir(self, cursor: DirCursor) -> Iterator[FileInfo]:
        while (info := self.readdir(cursor)) is not None:
            yield info

    def listdir(self, path: str) -> List[FileInfo]:
        """Return every visible item of the directory at ``path``."""
        return list(self._iterdir(self.opendir(path)))