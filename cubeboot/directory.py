"""Path walking and directory scanning on a FAT volume."""

from __future__ import annotations

from typing import Optional, Tuple

from .diskio import DiskError
from .fat import DIR_ENTRY_SIZE, Attr, DirEntry, FatError, FatType, FResult, Volume

NAME_SIZE = 11

_ENTRIES_PER_SECTOR = 16
_MAX_INDEX = 0xFFFF
_SPACE = 0x20
_DOT = 0x2E
_SLASH = 0x2F


def create_name(path: str) -> Tuple[bytes, bool, str]:
    """Split the first segment off ``path`` in 8.3 directory form.

    Returns the 11-byte name, whether this was the last segment of the
    path, and the remainder of the path.  Names are not case-folded.
    """
    raw = path.encode("latin-1")
    sfn = bytearray(b" " * NAME_SIZE)
    si = i = 0
    ni = 8
    c = 0
    while True:
        c = raw[si] if si < len(raw) else 0
        si += 1
        if c <= _SPACE or c == _SLASH:
            break
        if c == _DOT or i >= ni:
            if ni != 8 or c != _DOT:
                break
            i, ni = 8, NAME_SIZE
            continue
        sfn[i] = c
        i += 1
    return bytes(sfn), c <= _SPACE, raw[si:].decode("latin-1")


class DirCursor:
    """A position within a directory table."""

    def __init__(self, volume: Volume, start_cluster: int = 0) -> None:
        self.volume = volume
        self.sclust = start_cluster
        self.index = 0
        self.clust = 0
        self.sect = 0

    def rewind(self) -> None:
        """Move to the first entry of the table starting at ``sclust``."""
        volume = self.volume
        self.index = 0
        clst = self.sclust
        if clst == 1 or clst >= volume.n_fatent:
            raise FatError(FResult.DISK_ERR, f"invalid directory cluster {clst}")
        if not clst and volume.fs_type is FatType.FAT32:
            clst = volume.dirbase
        self.clust = clst
        self.sect = volume.clust2sect(clst) if clst else volume.dirbase

    def advance(self) -> bool:
        """Step to the next entry; return False at the end of the table."""
        volume = self.volume
        i = self.index + 1
        if i > _MAX_INDEX or not self.sect:
            return False
        if i % _ENTRIES_PER_SECTOR == 0:
            self.sect += 1
            if self.clust == 0:
                if i >= volume.n_rootdir:
                    return False
            elif (i // _ENTRIES_PER_SECTOR) & (volume.csize - 1) == 0:
                clst = volume.get_fat(self.clust)
                if clst <= 1:
                    raise FatError(FResult.DISK_ERR, f"broken cluster chain at {self.clust}")
                if clst >= volume.n_fatent:
                    return False
                self.clust = clst
                self.sect = volume.clust2sect(clst)
        self.index = i
        return True

    def _read_raw(self) -> bytes:
        offset = (self.index % _ENTRIES_PER_SECTOR) * DIR_ENTRY_SIZE
        try:
            return self.volume.reader.read(self.sect, offset, DIR_ENTRY_SIZE)
        except DiskError as exc:
            raise FatError(FResult.DISK_ERR, f"cannot read directory sector {self.sect}") from exc

    def find(self, name: bytes) -> DirEntry:
        """Return the entry named ``name`` (11 bytes, 8.3 form)."""
        self.rewind()
        while True:
            entry = DirEntry.parse(self._read_raw())
            if entry.is_end:
                raise FatError(FResult.NO_FILE, f"{name!r} not found")
            if not entry.is_volume and entry.name == name[:NAME_SIZE]:
                return entry
            if not self.advance():
                raise FatError(FResult.NO_FILE, f"{name!r} not found")

    def read_entry(self) -> Optional[DirEntry]:
        """Return the next visible entry at or after the cursor, or None at the end."""
        try:
            while self.sect:
                entry = DirEntry.parse(self._read_raw())
                if entry.is_end:
                    break
                first = entry.name[0]
                if first != 0xE5 and first != _DOT and not (entry.attr & Attr.MASK & Attr.VOL):
                    return entry
                if not self.advance():
                    break
        except FatError:
            self.sect = 0
            raise
        self.sect = 0
        return None


def follow_path(volume: Volume, path: str) -> Tuple[DirCursor, Optional[DirEntry]]:
    """Walk ``path`` from the root directory.

    Returns the cursor left on the directory holding the object, and its
    entry; the entry is None when the path names the root directory.
    """
    path = path.lstrip(" ")
    if path.startswith("/"):
        path = path[1:]
    cursor = DirCursor(volume, 0)

    if not path or path[0] < " ":
        cursor.rewind()
        return cursor, None

    while True:
        name, last, path = create_name(path)
        entry = cursor.find(name)
        if last:
            return cursor, entry
        if not entry.is_dir:
            raise FatError(FResult.NO_FILE, f"{name!r} is not a directory")
        cursor.sclust = volume.cluster_of(entry)