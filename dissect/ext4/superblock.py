# References:
# - https://www.kernel.org/doc/html/latest/filesystems/ext4/globals.html
# - https://github.com/torvalds/linux/blob/master/fs/ext4/ext4.h
# - https://git.kernel.org/pub/scm/fs/ext2/e2fsprogs.git/tree/lib/ext2fs/ext2_fs.h
from __future__ import annotations

import io
import logging
import os
from datetime import datetime
from functools import cached_property
from typing import Any, BinaryIO, Union
from uuid import UUID

from dissect.util import ts

from dissect.ext4.c_ext4 import c_ext4
from dissect.ext4.exceptions import InvalidSuperblockError, ReadError

log = logging.getLogger(__name__)
log.setLevel(os.getenv("DISSECT_LOG_EXT4", "CRITICAL"))

Source = Union[BinaryIO, bytes, bytearray, memoryview]


class Superblock:
    """Ext2/3/4 superblock implementation.

    Reads exactly one superblock from the given source and validates its magic. The source must already be
    positioned at the superblock, use :func:`decode_volume` to read it from the start of a volume instead.

    Every on-disk field is available as an attribute of the same name (e.g. ``sb.s_inodes_count``). Fields of the
    extended zone are always decoded, but only carry meaning if :meth:`has_extended` returns ``True``.

    Args:
        fh: A file-like object or buffer positioned at the superblock.

    Raises:
        ReadError: If fewer than 1024 bytes could be read, or the source raised an error.
        InvalidSuperblockError: If the magic does not match.
    """

    def __init__(self, fh: Source):
        if isinstance(fh, (bytes, bytearray, memoryview)):
            fh = io.BytesIO(fh)

        self.raw = _read_exact(fh, c_ext4.EXT4_SUPERBLOCK_SIZE)
        self.struct = c_ext4.ext4_super_block(self.raw)

        if self.struct.s_magic != c_ext4.EXT4_SUPER_MAGIC:
            log.debug("Superblock magic mismatch: 0x%04x", self.struct.s_magic)
            raise InvalidSuperblockError(f"Invalid ext4 superblock magic: 0x{self.struct.s_magic:04x}")

        log.debug(
            "Decoded superblock: rev=%d block_size=%d compat=0x%x ro_compat=0x%x incompat=0x%x",
            self.struct.s_rev_level,
            self.block_size,
            self.struct.s_feature_compat,
            self.struct.s_feature_ro_compat,
            self.struct.s_feature_incompat,
        )

    def __getattr__(self, name: str) -> Any:
        if name.startswith("s_"):
            return getattr(self.struct, name)
        raise AttributeError(f"{type(self).__name__!r} object has no attribute {name!r}")

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Superblock):
            return NotImplemented
        return self.raw == other.raw

    def __hash__(self) -> int:
        return hash(self.raw)

    def __repr__(self) -> str:
        return f"<Superblock rev={self.struct.s_rev_level} block_size={self.block_size} uuid={self.uuid}>"

    def has_extended(self) -> bool:
        """Return whether the fields past ``s_def_resgid`` are valid (dynamic revision or later)."""
        return self.struct.s_rev_level >= c_ext4.EXT4_DYNAMIC_REV

    def has_compatible_feature(self, mask: int) -> bool:
        """Return whether any of the bits in ``mask`` are set in the compatible feature set."""
        return (self.struct.s_feature_compat & mask) != 0

    def has_readonly_compatible_feature(self, mask: int) -> bool:
        """Return whether any of the bits in ``mask`` are set in the read-only compatible feature set."""
        return (self.struct.s_feature_ro_compat & mask) != 0

    def has_incompatible_feature(self, mask: int) -> bool:
        """Return whether any of the bits in ``mask`` are set in the incompatible feature set."""
        return (self.struct.s_feature_incompat & mask) != 0

    def is_64bit(self) -> bool:
        """Return whether the high halves of the block counts are in use."""
        return self.has_incompatible_feature(c_ext4.EXT4_FEATURE_INCOMPAT_64BIT)

    @cached_property
    def block_size(self) -> int:
        """Return the effective block size in bytes."""
        return 1 << (c_ext4.EXT4_MIN_BLOCK_LOG_SIZE + self.struct.s_log_block_size)

    @cached_property
    def cluster_size(self) -> int:
        """Return the effective allocation cluster size in bytes."""
        return 1 << (c_ext4.EXT4_MIN_BLOCK_LOG_SIZE + self.struct.s_log_cluster_size)

    @cached_property
    def inodes_count(self) -> int:
        return self.struct.s_inodes_count

    @cached_property
    def free_inodes_count(self) -> int:
        return self.struct.s_free_inodes_count

    @cached_property
    def blocks_count(self) -> int:
        """Return the total number of blocks."""
        return self._blocks(self.struct.s_blocks_count_lo, self.struct.s_blocks_count_hi)

    @cached_property
    def r_blocks_count(self) -> int:
        """Return the number of blocks reserved for the super user."""
        return self._blocks(self.struct.s_r_blocks_count_lo, self.struct.s_r_blocks_count_hi)

    @cached_property
    def free_blocks_count(self) -> int:
        """Return the number of free blocks."""
        return self._blocks(self.struct.s_free_blocks_count_lo, self.struct.s_free_blocks_count_hi)

    @cached_property
    def first_ino(self) -> int:
        """Return the first non-reserved inode number."""
        if not self.has_extended():
            return c_ext4.EXT4_GOOD_OLD_FIRST_INO
        return self.struct.s_first_ino

    @cached_property
    def inode_size(self) -> int:
        """Return the size of the on-disk inode structure."""
        if not self.has_extended():
            return c_ext4.EXT4_GOOD_OLD_INODE_SIZE
        return self.struct.s_inode_size

    @cached_property
    def desc_size(self) -> int:
        """Return the size of a block group descriptor."""
        if self.is_64bit():
            return self.struct.s_desc_size
        return c_ext4.EXT4_MIN_DESC_SIZE

    @cached_property
    def uuid(self) -> UUID:
        return UUID(bytes=self.struct.s_uuid)

    @cached_property
    def journal_uuid(self) -> UUID:
        return UUID(bytes=self.struct.s_journal_uuid)

    @cached_property
    def hash_seed(self) -> UUID:
        return UUID(bytes=self.struct.s_hash_seed)

    @cached_property
    def volume_name(self) -> str:
        return _cstr(self.struct.s_volume_name)

    @cached_property
    def last_mounted(self) -> str:
        return _cstr(self.struct.s_last_mounted)

    @cached_property
    def mount_opts(self) -> str:
        return _cstr(self.struct.s_mount_opts)

    @cached_property
    def first_error_func(self) -> str:
        return _cstr(self.struct.s_first_error_func)

    @cached_property
    def last_error_func(self) -> str:
        return _cstr(self.struct.s_last_error_func)

    @cached_property
    def mtime(self) -> datetime:
        """Return datetime timestamp of the last mount."""
        return ts.from_unix(self.mtime_ts)

    @cached_property
    def mtime_ts(self) -> int:
        """Return Unix timestamp of the last mount."""
        return self._timestamp(self.struct.s_mtime, self.struct.s_mtime_hi)

    @cached_property
    def wtime(self) -> datetime:
        """Return datetime timestamp of the last write."""
        return ts.from_unix(self.wtime_ts)

    @cached_property
    def wtime_ts(self) -> int:
        """Return Unix timestamp of the last write."""
        return self._timestamp(self.struct.s_wtime, self.struct.s_wtime_hi)

    @cached_property
    def lastcheck(self) -> datetime:
        """Return datetime timestamp of the last filesystem check."""
        return ts.from_unix(self.lastcheck_ts)

    @cached_property
    def lastcheck_ts(self) -> int:
        """Return Unix timestamp of the last filesystem check."""
        return self._timestamp(self.struct.s_lastcheck, self.struct.s_lastcheck_hi)

    @cached_property
    def mkfs_time(self) -> datetime:
        """Return datetime timestamp of filesystem creation."""
        return ts.from_unix(self.mkfs_time_ts)

    @cached_property
    def mkfs_time_ts(self) -> int:
        """Return Unix timestamp of filesystem creation."""
        return self._timestamp(self.struct.s_mkfs_time, self.struct.s_mkfs_time_hi)

    @cached_property
    def first_error_time(self) -> datetime:
        """Return datetime timestamp of the first recorded error."""
        return ts.from_unix(self.first_error_time_ts)

    @cached_property
    def first_error_time_ts(self) -> int:
        """Return Unix timestamp of the first recorded error."""
        return self._timestamp(self.struct.s_first_error_time, self.struct.s_first_error_time_hi)

    @cached_property
    def last_error_time(self) -> datetime:
        """Return datetime timestamp of the most recent error."""
        return ts.from_unix(self.last_error_time_ts)

    @cached_property
    def last_error_time_ts(self) -> int:
        """Return Unix timestamp of the most recent error."""
        return self._timestamp(self.struct.s_last_error_time, self.struct.s_last_error_time_hi)

    def _blocks(self, lo: int, hi: int) -> int:
        if self.is_64bit():
            return (hi << 32) | lo
        return lo

    def _timestamp(self, lo: int, hi: int) -> int:
        # The high bytes live in what used to be reserved space of the original revision
        if self.has_extended():
            return (hi << 32) | lo
        return lo


def decode(fh: Source) -> Superblock:
    """Decode the superblock at the current position of ``fh``.

    Args:
        fh: A file-like object or buffer positioned at the superblock.
    """
    return Superblock(fh)


def decode_volume(fh: BinaryIO) -> Superblock:
    """Decode the primary superblock of a volume.

    Args:
        fh: A seekable file-like object of the entire volume.
    """
    fh.seek(c_ext4.EXT4_SUPERBLOCK_OFFSET)
    return Superblock(fh)


def _read_exact(fh: BinaryIO, size: int) -> bytes:
    buf = bytearray()
    while len(buf) < size:
        try:
            chunk = fh.read(size - len(buf))
        except OSError as e:
            raise ReadError(f"Failed to read ext4 superblock: {e}") from e

        if not chunk:
            break
        buf += chunk

    if len(buf) < size:
        log.debug("Short read on superblock: %d of %d bytes", len(buf), size)
        raise ReadError(f"Short read on ext4 superblock: got {len(buf)} of {size} bytes")

    return bytes(buf)


def _cstr(buf: bytes) -> str:
    return buf.split(b"\x00")[0].decode(errors="surrogateescape")
