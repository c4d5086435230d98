from __future__ import annotations

from typing import Callable

from dissect.ext4.c_ext4 import (
    CHECKSUM_TYPE_NAMES,
    CREATOR_OS_NAMES,
    ERRORS_NAMES,
    HASH_VERSION_NAMES,
    REVISION_NAMES,
    STATE_NAMES,
)
from dissect.ext4.features import CATEGORIES
from dissect.ext4.superblock import Superblock

# Plain scalar fields, in on-disk order. Fields with a custom rendering are handled in _FORMATTERS.
BASE_FIELDS = (
    "s_inodes_count",
    "s_blocks_count_lo",
    "s_r_blocks_count_lo",
    "s_free_blocks_count_lo",
    "s_free_inodes_count",
    "s_first_data_block",
    "s_log_block_size",
    "s_log_cluster_size",
    "s_blocks_per_group",
    "s_clusters_per_group",
    "s_inodes_per_group",
    "s_mtime",
    "s_wtime",
    "s_mnt_count",
    "s_max_mnt_count",
    "s_magic",
    "s_state",
    "s_errors",
    "s_minor_rev_level",
    "s_lastcheck",
    "s_checkinterval",
    "s_creator_os",
    "s_rev_level",
    "s_def_resuid",
    "s_def_resgid",
)

EXTENDED_FIELDS = (
    "s_first_ino",
    "s_inode_size",
    "s_block_group_nr",
    "s_feature_compat",
    "s_feature_incompat",
    "s_feature_ro_compat",
    "s_uuid",
    "s_volume_name",
    "s_last_mounted",
    "s_algorithm_usage_bitmap",
    "s_prealloc_blocks",
    "s_prealloc_dir_blocks",
    "s_reserved_gdt_blocks",
    "s_journal_uuid",
    "s_journal_inum",
    "s_journal_dev",
    "s_last_orphan",
    "s_hash_seed",
    "s_def_hash_version",
    "s_jnl_backup_type",
    "s_desc_size",
    "s_default_mount_opts",
    "s_first_meta_bg",
    "s_mkfs_time",
    "s_jnl_blocks",
    "s_blocks_count_hi",
    "s_r_blocks_count_hi",
    "s_free_blocks_count_hi",
    "s_min_extra_isize",
    "s_want_extra_isize",
    "s_flags",
    "s_raid_stride",
    "s_mmp_update_interval",
    "s_mmp_block",
    "s_raid_stripe_width",
    "s_log_groups_per_flex",
    "s_checksum_type",
    "s_encryption_level",
    "s_kbytes_written",
    "s_snapshot_inum",
    "s_snapshot_id",
    "s_snapshot_r_blocks_count",
    "s_snapshot_list",
    "s_error_count",
    "s_first_error_time",
    "s_first_error_ino",
    "s_first_error_block",
    "s_first_error_func",
    "s_first_error_line",
    "s_last_error_time",
    "s_last_error_ino",
    "s_last_error_line",
    "s_last_error_block",
    "s_last_error_func",
    "s_mount_opts",
    "s_usr_quota_inum",
    "s_grp_quota_inum",
    "s_overhead_clusters",
    "s_backup_bgs",
    "s_encrypt_algos",
    "s_lpf_ino",
    "s_prj_quota_inum",
    "s_checksum_seed",
    "s_checksum",
)


def _named(value: int, names: dict[int, str]) -> str:
    return f"({value}) {names.get(value, 'unknown')}"


def _state(sb: Superblock) -> str:
    names = [name for bit, name in STATE_NAMES.items() if sb.s_state & bit]
    return f"({sb.s_state:04x}) {' '.join(names) or 'not clean'}"


def _hex(field: str) -> Callable[[Superblock], str]:
    return lambda sb: f"(0x{getattr(sb, field):x})"


def _time(name: str) -> Callable[[Superblock], str]:
    def render(sb: Superblock) -> str:
        try:
            return f"[{getattr(sb, name).isoformat()}]"
        except (ValueError, OverflowError, OSError):
            return f"({getattr(sb, f'{name}_ts')}) out of range"

    return render


_FORMATTERS: dict[str, Callable[[Superblock], str]] = {
    "s_log_block_size": lambda sb: f"({sb.s_log_block_size}) => ({sb.block_size})",
    "s_log_cluster_size": lambda sb: f"({sb.s_log_cluster_size}) => ({sb.cluster_size})",
    "s_mtime": _time("mtime"),
    "s_wtime": _time("wtime"),
    "s_lastcheck": _time("lastcheck"),
    "s_mkfs_time": _time("mkfs_time"),
    "s_first_error_time": _time("first_error_time"),
    "s_last_error_time": _time("last_error_time"),
    "s_magic": lambda sb: f"[{sb.s_magic:04x}]",
    "s_state": _state,
    "s_errors": lambda sb: _named(sb.s_errors, ERRORS_NAMES),
    "s_creator_os": lambda sb: _named(sb.s_creator_os, CREATOR_OS_NAMES),
    "s_rev_level": lambda sb: _named(sb.s_rev_level, REVISION_NAMES),
    "s_feature_compat": _hex("s_feature_compat"),
    "s_feature_incompat": _hex("s_feature_incompat"),
    "s_feature_ro_compat": _hex("s_feature_ro_compat"),
    "s_default_mount_opts": _hex("s_default_mount_opts"),
    "s_flags": _hex("s_flags"),
    "s_checksum_seed": _hex("s_checksum_seed"),
    "s_checksum": _hex("s_checksum"),
    "s_uuid": lambda sb: f"[{sb.uuid}]",
    "s_journal_uuid": lambda sb: f"[{sb.journal_uuid}]",
    "s_hash_seed": lambda sb: f"[{sb.hash_seed}]",
    "s_volume_name": lambda sb: f"[{sb.volume_name}]",
    "s_last_mounted": lambda sb: f"[{sb.last_mounted}]",
    "s_mount_opts": lambda sb: f"[{sb.mount_opts}]",
    "s_first_error_func": lambda sb: f"[{sb.first_error_func}]",
    "s_last_error_func": lambda sb: f"[{sb.last_error_func}]",
    "s_def_hash_version": lambda sb: _named(sb.s_def_hash_version, HASH_VERSION_NAMES),
    "s_checksum_type": lambda sb: _named(sb.s_checksum_type, CHECKSUM_TYPE_NAMES),
}


def format_field(sb: Superblock, field: str) -> str:
    """Render a single superblock field as ``name: value``."""
    formatter = _FORMATTERS.get(field)
    value = formatter(sb) if formatter else f"({getattr(sb, field)})"
    return f"{field}: {value}"


def dump(sb: Superblock) -> str:
    """Return a human readable report of the superblock fields and every known feature flag."""
    lines = ["Superblock Info", ""]
    lines.extend(format_field(sb, field) for field in BASE_FIELDS)

    if sb.has_extended():
        lines.append("")
        lines.extend(format_field(sb, field) for field in EXTENDED_FIELDS)

    for category in CATEGORIES:
        lines.extend(["", f"Feature ({category.title})", ""])
        for name in category.names:
            mask = category.flags[name]
            lines.append(f"  {name:>15} (0x{mask:04x}): {category.test(sb, mask)}")

    lines.append("")
    return "\n".join(lines)
