# cubeboot

Building blocks for a small boot loader, usable from ordinary Python. It has no
dependencies outside the standard library.

- **`cubeboot.diskio`**: `MemoryDisc` serves fixed-size sectors from bytes in
  memory. `ImageDisc` serves them from a disk image file, and it is also a
  context manager. Both implement `DiscInterface`: `startup`, `is_inserted`,
  `read_sectors` and `shutdown`. `SectorReader` reads a byte range within one
  512-byte sector. Failed reads raise `DiskError`.
- **`cubeboot.fat`**: the on-disk structures. `Volume.from_disk` finds a FAT12,
  FAT16 or FAT32 volume, either on sector 0 or behind the first entry of an MBR
  partition table. The module also has `check_fs`, `DirEntry`, `FileInfo`, and
  the `FResult`, `FatType` and `Attr` enums. Errors raise `FatError`, whose
  `result` attribute holds an `FResult`.
- **`cubeboot.directory`**: `create_name` turns a path segment into its 8.3
  directory form. `follow_path` walks a path from the root directory.
  `DirCursor` steps through a directory table.
- **`cubeboot.petitfs`**: `PetitFs` is a read-only file system with one open
  file at a time. It has `mount`, `open`, `size`, `read`, `lseek`, `opendir`,
  `readdir` and `listdir`.
- **`cubeboot.uff`**: `UnifiedFs` puts one mount/open/read/lseek/size/unmount
  surface over `PetitFs` and can be used as a context manager. Its `write`
  always raises `FatError`. `path_fix` upper-cases the ASCII letters in a path.
- **`cubeboot.state`**: `CubebootState` and `HeldButton` pack and unpack the
  boot code and the 13-entry held-button table in a fixed big-endian layout
  (`CubebootState.SIZE` bytes).
- **`cubeboot.console`**: `iprintf` formats text printf-style and writes it to
  standard error, or to a stream chosen with `set_stream`. `set_uart` adds a
  byte-by-byte serial writer; on that writer, newlines are sent as carriage
  returns.
- **`cubeboot.pixels`**: per-pixel conversions used by console textures:
  `rgb8_to_rgb565`, `rgb8_to_rgb5a3`, `rgb8_to_ycbycr`, `ycbycr_to_rgb8` and
  `coords_rgba8`.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Reading a file from a FAT image

Names are matched exactly as stored in the 8.3 directory entries, and those
are normally upper case. Pass paths through `path_fix` before you open them.

```python
from cubeboot.diskio import ImageDisc
from cubeboot.petitfs import PetitFs
from cubeboot.uff import path_fix

with ImageDisc("card.img", 512) as disc:
    fs = PetitFs(disc)
    fs.mount()
    fs.open(path_fix("/cubeboot.ini"))
    data = fs.read(fs.size())
    for info in fs.listdir("/"):
        print(info.fname, info.fsize)
```

## Packing the boot state

```python
from cubeboot.state import BUTTON_DOWN, CubebootState

state = CubebootState(boot_code=1)
state.held_buttons[12].status = BUTTON_DOWN
blob = state.pack()
assert CubebootState.unpack(blob) == state
```

## What the package does not do

- It only reads FAT volumes. It cannot write files, and it does not support
  long file names.
- It does not probe or select among several devices. You pass one
  `DiscInterface` to `PetitFs` or `UnifiedFs` yourself.
- It does not parse a boot settings file.
- It does not decode or encode PNG images, and it does not convert whole images
  into tiled textures. Only the single-pixel conversions in `cubeboot.pixels`
  are provided.
- It installs no command-line program.