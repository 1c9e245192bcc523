import pytest

from cubeboot.diskio import MemoryDisc, SectorReader
from cubeboot.fat import (
    DirEntry,
    FatError,
    FatType,
    FResult,
    Volume,
    check_fs,
    ld_dword,
    ld_word,
)

SECTOR = 512
RSVD = 1
NUM_FATS = 2
FAT_SECTORS = 1
ROOT_ENTRIES = 16
TOTAL = 64
CSIZE = 1
FAT_SECTOR = RSVD
ROOT_SECTOR = RSVD + NUM_FATS * FAT_SECTORS
DATA_SECTOR = ROOT_SECTOR + ROOT_ENTRIES * 32 // SECTOR


def _put16(buf, off, value):
    buf[off:off + 2] = value.to_bytes(2, "little")


def _put32(buf, off, value):
    buf[off:off + 4] = value.to_bytes(4, "little")


def _set_fat12(fat, n, value):
    off = n + n // 2
    if n & 1:
        fat[off] = (fat[off] & 0x0F) | ((value << 4) & 0xF0)
        fat[off + 1] = (value >> 4) & 0xFF
    else:
        fat[off] = value & 0xFF
        fat[off + 1] = (fat[off + 1] & 0xF0) | ((value >> 8) & 0x0F)


def _boot_sector(total=TOTAL, fat_sectors=FAT_SECTORS, tag=b"FAT12   "):
    boot = bytearray(SECTOR)
    _put16(boot, 11, SECTOR)
    boot[13] = CSIZE
    _put16(boot, 14, RSVD)
    boot[16] = NUM_FATS
    _put16(boot, 17, ROOT_ENTRIES)
    _put16(boot, 19, total)
    _put16(boot, 22, fat_sectors)
    boot[54:62] = tag
    boot[510:512] = b"\x55\xaa"
    return boot


def _fat12_image():
    image = bytearray(TOTAL * SECTOR)
    image[:SECTOR] = _boot_sector()
    fat = bytearray(SECTOR)
    _set_fat12(fat, 2, 3)
    _set_fat12(fat, 3, 0xFFF)
    _set_fat12(fat, 4, 0x123)
    image[FAT_SECTOR * SECTOR:(FAT_SECTOR + 1) * SECTOR] = fat
    return image


def _reader(image):
    return SectorReader(MemoryDisc(image))


def _raw_entry(name, attr=0x20, hi=0, lo=0, wtime=0, wdate=0, size=0):
    raw = bytearray(32)
    raw[:11] = name
    raw[11] = attr
    _put16(raw, 20, hi)
    _put16(raw, 22, wtime)
    _put16(raw, 24, wdate)
    _put16(raw, 26, lo)
    _put32(raw, 28, size)
    return bytes(raw)


def test_ld_word_and_dword_are_little_endian():
    assert ld_word(b"\x55\xaa") == 0xAA55
    assert ld_word(b"FA") == 0x4146
    assert ld_dword(b"\x00\x00\x00\x00\x55\xaa\x00\x00", 4) == 0xAA55


def test_ld_word_short_input():
    with pytest.raises(ValueError):
        ld_word(b"\x01")


def test_check_fs_classifies_sectors():
    assert check_fs(_reader(_fat12_image()), 0) == 0
    assert check_fs(_reader(bytes(SECTOR)), 0) == 2
    signed = bytearray(SECTOR)
    signed[510:512] = b"\x55\xaa"
    assert check_fs(_reader(signed), 0) == 1
    assert check_fs(_reader(bytes(SECTOR)), 5) == 3


def test_mount_fat12_geometry():
    vol = Volume.from_disk(_reader(_fat12_image()))
    assert vol.fs_type is FatType.FAT12
    assert vol.csize == CSIZE
    assert vol.n_rootdir == ROOT_ENTRIES
    assert vol.fatbase == FAT_SECTOR
    assert vol.dirbase == ROOT_SECTOR
    assert vol.database == DATA_SECTOR


def test_fat12_chain():
    vol = Volume.from_disk(_reader(_fat12_image()))
    assert vol.get_fat(2) == 3
    assert vol.get_fat(3) == 0xFFF
    assert vol.get_fat(4) == 0x123


def test_get_fat_out_of_range():
    vol = Volume.from_disk(_reader(_fat12_image()))
    with pytest.raises(FatError) as info:
        vol.get_fat(1)
    assert info.value.result is FResult.DISK_ERR
    with pytest.raises(FatError):
        vol.get_fat(vol.n_fatent)


def test_clust2sect():
    vol = Volume.from_disk(_reader(_fat12_image()))
    assert vol.clust2sect(2) == DATA_SECTOR
    assert vol.clust2sect(3) - vol.clust2sect(2) == vol.csize
    with pytest.raises(FatError) as info:
        vol.clust2sect(0)
    assert info.value.result is FResult.DISK_ERR


def test_mount_through_partition_table():
    part = _fat12_image()
    mbr = bytearray(SECTOR)
    mbr[446 + 4] = 0x01
    _put32(mbr, 446 + 8, 1)
    mbr[510:512] = b"\x55\xaa"
    vol = Volume.from_disk(_reader(bytes(mbr) + bytes(part)))
    assert vol.fatbase == 1 + RSVD
    assert vol.fs_type is FatType.FAT12


def test_mount_without_filesystem():
    with pytest.raises(FatError) as info:
        Volume.from_disk(_reader(bytes(4 * SECTOR)))
    assert info.value.result is FResult.NO_FILESYSTEM


def test_mount_disk_error():
    with pytest.raises(FatError) as info:
        Volume.from_disk(_reader(b""))
    assert info.value.result is FResult.DISK_ERR


def test_mount_fat16():
    image = bytearray(4 * SECTOR)
    image[:SECTOR] = _boot_sector(total=40000, fat_sectors=200, tag=b"FAT16   ")
    _put16(image, FAT_SECTOR * SECTOR + 4, 0xFFFF)
    vol = Volume.from_disk(_reader(image))
    assert vol.fs_type is FatType.FAT16
    assert vol.get_fat(2) == 0xFFFF


def test_mount_fat32_and_cluster_of():
    boot = bytearray(SECTOR)
    boot[13] = 1
    _put16(boot, 14, 1)
    boot[16] = 1
    _put32(boot, 32, 0x20000)
    _put32(boot, 36, 1)
    _put32(boot, 44, 2)
    boot[82:90] = b"FAT32   "
    boot[510:512] = b"\x55\xaa"
    image = bytearray(4 * SECTOR)
    image[:SECTOR] = boot
    _put32(image, SECTOR + 8, 0xFFFFFFFF)
    vol = Volume.from_disk(_reader(image))
    assert vol.fs_type is FatType.FAT32
    assert vol.dirbase == 2
    assert vol.get_fat(2) == 0x0FFFFFFF
    entry = DirEntry.parse(_raw_entry(b"KERNEL  BIN", hi=1, lo=7))
    clst = vol.cluster_of(entry)
    assert clst >> 16 == 1
    assert clst & 0xFFFF == 7


def test_cluster_of_ignores_high_word_on_fat12():
    vol = Volume.from_disk(_reader(_fat12_image()))
    entry = DirEntry.parse(_raw_entry(b"KERNEL  BIN", hi=1, lo=7))
    assert vol.cluster_of(entry) == 7


def test_dir_entry_parse_fields():
    raw = _raw_entry(b"BOOT    DOL", attr=0x20, hi=1, lo=2, wtime=0x1111, wdate=0x2222, size=1234)
    entry = DirEntry.parse(raw)
    assert entry.name == b"BOOT    DOL"
    assert entry.attr == 0x20
    assert entry.cluster_lo == 2
    assert entry.file_size == 1234
    assert not entry.is_dir


def test_dir_entry_file_info_names():
    info = DirEntry.parse(_raw_entry(b"BOOT    DOL", size=1234, wdate=0x2222, wtime=0x1111)).to_file_info()
    assert info.fname == "BOOT.DOL"
    assert info.fsize == 1234
    assert info.fdate == 0x2222
    assert info.ftime == 0x1111
    assert DirEntry.parse(_raw_entry(b"README     ")).to_file_info().fname == "README"


def test_dir_entry_kanji_lead_byte():
    info = DirEntry.parse(_raw_entry(b"\x05AB     TXT")).to_file_info()
    assert info.fname[0] == "\xe5"


def test_dir_entry_parse_wrong_length():
    with pytest.raises(ValueError):
        DirEntry.parse(bytes(31))