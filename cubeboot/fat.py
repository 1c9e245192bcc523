"""On-disk FAT structures: boot record, FAT chains and directory entries."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from itertools import takewhile

from .diskio import SECTOR_SIZE, DiskError, SectorReader

DIR_ENTRY_SIZE = 32

_MASK32 = 0xFFFFFFFF

_BPB_SEC_PER_CLUS = 13
_BPB_RSVD_SEC_CNT = 14
_BPB_NUM_FATS = 16
_BPB_ROOT_ENT_CNT = 17
_BPB_TOT_SEC16 = 19
_BPB_FATSZ16 = 22
_BPB_TOT_SEC32 = 32
_BPB_FATSZ32 = 36
_BPB_ROOT_CLUS = 44
_BPB_END = 49
_BS_FIL_SYS_TYPE = 54
_BS_FIL_SYS_TYPE32 = 82
_BS_55AA = 510
_MBR_TABLE = 446

_DIR_ATTR = 11
_DIR_FST_CLUS_HI = 20
_DIR_WRT_TIME = 22
_DIR_WRT_DATE = 24
_DIR_FST_CLUS_LO = 26
_DIR_FILE_SIZE = 28

_BOOT_SIGNATURE = 0xAA55
_FAT_TAG = 0x4146  # "FA"


class FResult(enum.IntEnum):
    OK = 0
    DISK_ERR = 1
    NOT_READY = 2
    NO_FILE = 3
    NOT_OPENED = 4
    NOT_ENABLED = 5
    NO_FILESYSTEM = 6


class FatError(Exception):
    """A filesystem operation failed with the given result."""

    def __init__(self, result: FResult, message: str | None = None) -> None:
        super().__init__(message or result.name)
        self.result = result


class FatType(enum.IntEnum):
    FAT12 = 1
    FAT16 = 2
    FAT32 = 3


class Attr(enum.IntFlag):
    RDO = 0x01
    HID = 0x02
    SYS = 0x04
    VOL = 0x08
    LFN = 0x0F
    DIR = 0x10
    ARC = 0x20
    MASK = 0x3F


@dataclass(frozen=True)
class FileInfo:
    fname: str
    fsize: int
    fdate: int
    ftime: int
    fattrib: int


def ld_word(data, offset: int = 0) -> int:
    """Load a little-endian 16-bit value."""
    chunk = bytes(data[offset:offset + 2])
    if len(chunk) != 2:
        raise ValueError("not enough bytes for a word")
    return int.from_bytes(chunk, "little")


def ld_dword(data, offset: int = 0) -> int:
    """Load a little-endian 32-bit value."""
    chunk = bytes(data[offset:offset + 4])
    if len(chunk) != 4:
        raise ValueError("not enough bytes for a double word")
    return int.from_bytes(chunk, "little")


@dataclass(frozen=True)
class DirEntry:
    name: bytes
    attr: int
    cluster_hi: int
    cluster_lo: int
    wrt_time: int
    wrt_date: int
    file_size: int

    @classmethod
    def parse(cls, raw) -> "DirEntry":
        raw = bytes(raw)
        if len(raw) != DIR_ENTRY_SIZE:
            raise ValueError(f"directory entry must be {DIR_ENTRY_SIZE} bytes")
        return cls(
            name=raw[:11],
            attr=raw[_DIR_ATTR],
            cluster_hi=ld_word(raw, _DIR_FST_CLUS_HI),
            cluster_lo=ld_word(raw, _DIR_FST_CLUS_LO),
            wrt_time=ld_word(raw, _DIR_WRT_TIME),
            wrt_date=ld_word(raw, _DIR_WRT_DATE),
            file_size=ld_dword(raw, _DIR_FILE_SIZE),
        )

    @property
    def is_end(self) -> bool:
        return self.name[0] == 0

    @property
    def is_deleted(self) -> bool:
        return self.name[0] == 0xE5

    @property
    def is_dir(self) -> bool:
        return bool(self.attr & Attr.DIR)

    @property
    def is_volume(self) -> bool:
        return bool(self.attr & Attr.VOL)

    def to_file_info(self) -> FileInfo:
        """Build the dotted file name and the file's metadata."""
        body = bytearray(
            0xE5 if c == 0x05 else c
            for c in takewhile(lambda c: c != 0x20, self.name[:8])
        )
        if self.name[8] != 0x20:
            body.append(ord("."))
            body.extend(takewhile(lambda c: c != 0x20, self.name[8:11]))
        return FileInfo(
            fname=body.decode("latin-1"),
            fsize=self.file_size,
            fdate=self.wrt_date,
            ftime=self.wrt_time,
            fattrib=self.attr,
        )


def check_fs(reader: SectorReader, sect: int) -> int:
    """Classify a sector: 0 FAT boot record, 1 other boot record, 2 no boot record, 3 disk error."""
    try:
        signature = reader.read(sect, _BS_55AA, 2)
    except DiskError:
        return 3
    if ld_word(signature) != _BOOT_SIGNATURE:
        return 2
    for offset in (_BS_FIL_SYS_TYPE, _BS_FIL_SYS_TYPE32):
        try:
            if ld_word(reader.read(sect, offset, 2)) == _FAT_TAG:
                return 0
        except DiskError:
            continue
    return 1


@dataclass
class Volume:
    """Geometry of a mounted FAT volume."""

    reader: SectorReader = field(repr=False, compare=False)
    fs_type: FatType
    csize: int
    n_rootdir: int
    n_fatent: int
    fatbase: int
    dirbase: int
    database: int

    @classmethod
    def from_disk(cls, reader: SectorReader) -> "Volume":
        """Locate a FAT volume on sector 0 or in the first partition."""
        bsect = 0
        fmt = check_fs(reader, bsect)
        if fmt == 1:
            try:
                entry = reader.read(bsect, _MBR_TABLE, 16)
            except DiskError:
                fmt = 3
            else:
                if entry[4]:
                    bsect = ld_dword(entry, 8)
                    fmt = check_fs(reader, bsect)
        if fmt == 3:
            raise FatError(FResult.DISK_ERR, "cannot read boot record")
        if fmt:
            raise FatError(FResult.NO_FILESYSTEM, "no FAT volume found")

        try:
            bpb = reader.read(bsect, 0, _BPB_END)
        except DiskError as exc:
            raise FatError(FResult.DISK_ERR, "cannot read BIOS parameter block") from exc

        fsize = ld_word(bpb, _BPB_FATSZ16) or ld_dword(bpb, _BPB_FATSZ32)
        fsize = (fsize * bpb[_BPB_NUM_FATS]) & _MASK32
        reserved = ld_word(bpb, _BPB_RSVD_SEC_CNT)
        fatbase = (bsect + reserved) & _MASK32
        csize = bpb[_BPB_SEC_PER_CLUS]
        n_rootdir = ld_word(bpb, _BPB_ROOT_ENT_CNT)
        tsect = ld_word(bpb, _BPB_TOT_SEC16) or ld_dword(bpb, _BPB_TOT_SEC32)
        if csize == 0:
            raise FatError(FResult.NO_FILESYSTEM, "cluster size is zero")
        data_sectors = (tsect - reserved - fsize - n_rootdir // 16) & _MASK32
        mclst = (data_sectors // csize + 2) & _MASK32

        if mclst < 0xFF7:
            fs_type = FatType.FAT12
        elif 0xFF8 <= mclst < 0xFFF7:
            fs_type = FatType.FAT16
        elif mclst >= 0xFFF7:
            fs_type = FatType.FAT32
        else:
            raise FatError(FResult.NO_FILESYSTEM, "ambiguous cluster count")

        if fs_type is FatType.FAT32:
            dirbase = ld_dword(bpb, _BPB_ROOT_CLUS)
        else:
            dirbase = (fatbase + fsize) & _MASK32
        database = (fatbase + fsize + n_rootdir // 16) & _MASK32

        return cls(
            reader=reader,
            fs_type=fs_type,
            csize=csize,
            n_rootdir=n_rootdir,
            n_fatent=mclst,
            fatbase=fatbase,
            dirbase=dirbase,
            database=database,
        )

    def get_fat(self, clst: int) -> int:
        """Return the FAT entry that follows cluster ``clst``."""
        if clst < 2 or clst >= self.n_fatent:
            raise FatError(FResult.DISK_ERR, f"cluster {clst} out of range")
        read = self.reader.read
        try:
            if self.fs_type is FatType.FAT12:
                bc = clst + clst // 2
                ofs, bc = bc % SECTOR_SIZE, bc // SECTOR_SIZE
                sector = self.fatbase + bc
                if ofs != SECTOR_SIZE - 1:
                    buf = read(sector, ofs, 2)
                else:
                    buf = read(sector, ofs, 1) + read(sector + 1, 0, 1)
                wc = ld_word(buf)
                return wc >> 4 if clst & 1 else wc & 0xFFF
            if self.fs_type is FatType.FAT16:
                return ld_word(read(self.fatbase + clst // 256, (clst % 256) * 2, 2))
            return ld_dword(read(self.fatbase + clst // 128, (clst % 128) * 4, 4)) & 0x0FFFFFFF
        except DiskError as exc:
            raise FatError(FResult.DISK_ERR, f"cannot read FAT entry {clst}") from exc

    def clust2sect(self, clst: int) -> int:
        """Return the first sector of cluster ``clst``."""
        index = clst - 2
        if index < 0 or index >= self.n_fatent - 2:
            raise FatError(FResult.DISK_ERR, f"invalid cluster {clst}")
        return index * self.csize + self.database

    def cluster_of(self, entry: DirEntry) -> int:
        """Return the start cluster recorded in a directory entry."""
        high = entry.cluster_hi << 16 if self.fs_type is FatType.FAT32 else 0
        return high + entry.cluster_lo