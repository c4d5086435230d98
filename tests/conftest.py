from __future__ import annotations

import gzip
import struct
from pathlib import Path
from typing import TYPE_CHECKING, Any, BinaryIO, Callable

import pytest

if TYPE_CHECKING:
    from collections.abc import Iterator

# Explicit on-disk layout of the superblock: name -> (offset, struct format)
LAYOUT = {
    "s_inodes_count": (0x00, "<I"),
    "s_blocks_count_lo": (0x04, "<I"),
    "s_r_blocks_count_lo": (0x08, "<I"),
    "s_free_blocks_count_lo": (0x0C, "<I"),
    "s_free_inodes_count": (0x10, "<I"),
    "s_first_data_block": (0x14, "<I"),
    "s_log_block_size": (0x18, "<I"),
    "s_log_cluster_size": (0x1C, "<I"),
    "s_blocks_per_group": (0x20, "<I"),
    "s_clusters_per_group": (0x24, "<I"),
    "s_inodes_per_group": (0x28, "<I"),
    "s_mtime": (0x2C, "<I"),
    "s_wtime": (0x30, "<I"),
    "s_mnt_count": (0x34, "<H"),
    "s_max_mnt_count": (0x36, "<H"),
    "s_magic": (0x38, "<H"),
    "s_state": (0x3A, "<H"),
    "s_errors": (0x3C, "<H"),
    "s_minor_rev_level": (0x3E, "<H"),
    "s_lastcheck": (0x40, "<I"),
    "s_checkinterval": (0x44, "<I"),
    "s_creator_os": (0x48, "<I"),
    "s_rev_level": (0x4C, "<I"),
    "s_def_resuid": (0x50, "<H"),
    "s_def_resgid": (0x52, "<H"),
    "s_first_ino": (0x54, "<I"),
    "s_inode_size": (0x58, "<H"),
    "s_block_group_nr": (0x5A, "<H"),
    "s_feature_compat": (0x5C, "<I"),
    "s_feature_incompat": (0x60, "<I"),
    "s_feature_ro_compat": (0x64, "<I"),
    "s_uuid": (0x68, "16s"),
    "s_volume_name": (0x78, "16s"),
    "s_last_mounted": (0x88, "64s"),
    "s_algorithm_usage_bitmap": (0xC8, "<I"),
    "s_prealloc_blocks": (0xCC, "<B"),
    "s_prealloc_dir_blocks": (0xCD, "<B"),
    "s_reserved_gdt_blocks": (0xCE, "<H"),
    "s_journal_uuid": (0xD0, "16s"),
    "s_journal_inum": (0xE0, "<I"),
    "s_journal_dev": (0xE4, "<I"),
    "s_last_orphan": (0xE8, "<I"),
    "s_hash_seed": (0xEC, "16s"),
    "s_def_hash_version": (0xFC, "<B"),
    "s_jnl_backup_type": (0xFD, "<B"),
    "s_desc_size": (0xFE, "<H"),
    "s_default_mount_opts": (0x100, "<I"),
    "s_first_meta_bg": (0x104, "<I"),
    "s_mkfs_time": (0x108, "<I"),
    "s_jnl_blocks": (0x10C, "<17I"),
    "s_blocks_count_hi": (0x150, "<I"),
    "s_r_blocks_count_hi": (0x154, "<I"),
    "s_free_blocks_count_hi": (0x158, "<I"),
    "s_min_extra_isize": (0x15C, "<H"),
    "s_want_extra_isize": (0x15E, "<H"),
    "s_flags": (0x160, "<I"),
    "s_raid_stride": (0x164, "<H"),
    "s_mmp_update_interval": (0x166, "<H"),
    "s_mmp_block": (0x168, "<Q"),
    "s_raid_stripe_width": (0x170, "<I"),
    "s_log_groups_per_flex": (0x174, "<B"),
    "s_checksum_type": (0x175, "<B"),
    "s_encryption_level": (0x176, "<B"),
    "s_reserved_pad": (0x177, "<B"),
    "s_kbytes_written": (0x178, "<Q"),
    "s_snapshot_inum": (0x180, "<I"),
    "s_snapshot_id": (0x184, "<I"),
    "s_snapshot_r_blocks_count": (0x188, "<Q"),
    "s_snapshot_list": (0x190, "<I"),
    "s_error_count": (0x194, "<I"),
    "s_first_error_time": (0x198, "<I"),
    "s_first_error_ino": (0x19C, "<I"),
    "s_first_error_block": (0x1A0, "<Q"),
    "s_first_error_func": (0x1A8, "32s"),
    "s_first_error_line": (0x1C8, "<I"),
    "s_last_error_time": (0x1CC, "<I"),
    "s_last_error_ino": (0x1D0, "<I"),
    "s_last_error_line": (0x1D4, "<I"),
    "s_last_error_block": (0x1D8, "<Q"),
    "s_last_error_func": (0x1E0, "32s"),
    "s_mount_opts": (0x200, "64s"),
    "s_usr_quota_inum": (0x240, "<I"),
    "s_grp_quota_inum": (0x244, "<I"),
    "s_overhead_clusters": (0x248, "<I"),
    "s_backup_bgs": (0x24C, "<2I"),
    "s_encrypt_algos": (0x254, "<4B"),
    "s_encrypt_pw_salt": (0x258, "16s"),
    "s_lpf_ino": (0x268, "<I"),
    "s_prj_quota_inum": (0x26C, "<I"),
    "s_checksum_seed": (0x270, "<I"),
    "s_wtime_hi": (0x274, "<B"),
    "s_mtime_hi": (0x275, "<B"),
    "s_mkfs_time_hi": (0x276, "<B"),
    "s_lastcheck_hi": (0x277, "<B"),
    "s_first_error_time_hi": (0x278, "<B"),
    "s_last_error_time_hi": (0x279, "<B"),
    "s_pad": (0x27A, "<2B"),
    "s_reserved": (0x27C, "<96I"),
    "s_checksum": (0x3FC, "<I"),
}


def absolute_path(filename: str) -> Path:
    return Path(__file__).parent / filename


def open_file_gz(name: str, mode: str = "rb") -> Iterator[gzip.GzipFile]:
    with gzip.GzipFile(absolute_path(name), mode) as f:
        yield f


def build_superblock(**fields: Any) -> bytes:
    """Build a 1024 byte superblock buffer from the explicit layout table.

    The magic defaults to 0xEF53 and the revision to dynamic. Array fields take a list.
    """
    fields.setdefault("s_magic", 0xEF53)
    fields.setdefault("s_rev_level", 1)

    buf = bytearray(1024)
    for name, value in fields.items():
        offset, fmt = LAYOUT[name]
        if isinstance(value, (list, tuple)):
            struct.pack_into(fmt, buf, offset, *value)
        else:
            struct.pack_into(fmt, buf, offset, value)

    return bytes(buf)


@pytest.fixture
def superblock_layout() -> dict[str, tuple[int, str]]:
    return LAYOUT


@pytest.fixture
def make_superblock() -> Callable[..., bytes]:
    return build_superblock


@pytest.fixture
def ext4_default() -> Iterator[BinaryIO]:
    yield from open_file_gz("_data/ext4.bin.gz")


@pytest.fixture
def ext4_64bit() -> Iterator[BinaryIO]:
    yield from open_file_gz("_data/ext4-64bit.bin.gz")


@pytest.fixture
def ext2_rev0() -> Iterator[BinaryIO]:
    yield from open_file_gz("_data/ext2.bin.gz")
