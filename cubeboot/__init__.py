"""Boot-loader support: sector access, read-only FAT volumes, boot state and pixel formats."""

__version__ = "0.1.0"