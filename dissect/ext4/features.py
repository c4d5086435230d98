from __future__ import annotations

from types import MappingProxyType
from typing import Callable, Iterator, Mapping, NamedTuple, Union

from dissect.ext4.c_ext4 import c_ext4
from dissect.ext4.superblock import Superblock

FEATURE_COMPAT: Mapping[str, int] = MappingProxyType(
    {
        "dir_prealloc": c_ext4.EXT4_FEATURE_COMPAT_DIR_PREALLOC,
        "imagic_inodes": c_ext4.EXT4_FEATURE_COMPAT_IMAGIC_INODES,
        "has_journal": c_ext4.EXT4_FEATURE_COMPAT_HAS_JOURNAL,
        "ext_attr": c_ext4.EXT4_FEATURE_COMPAT_EXT_ATTR,
        "resize_inode": c_ext4.EXT4_FEATURE_COMPAT_RESIZE_INODE,
        "dir_index": c_ext4.EXT4_FEATURE_COMPAT_DIR_INDEX,
        "sparse_super2": c_ext4.EXT4_FEATURE_COMPAT_SPARSE_SUPER2,
    }
)

FEATURE_RO_COMPAT: Mapping[str, int] = MappingProxyType(
    {
        "sparse_super": c_ext4.EXT4_FEATURE_RO_COMPAT_SPARSE_SUPER,
        "large_file": c_ext4.EXT4_FEATURE_RO_COMPAT_LARGE_FILE,
        "btree_dir": c_ext4.EXT4_FEATURE_RO_COMPAT_BTREE_DIR,
        "huge_file": c_ext4.EXT4_FEATURE_RO_COMPAT_HUGE_FILE,
        "gdt_csum": c_ext4.EXT4_FEATURE_RO_COMPAT_GDT_CSUM,
        "dir_nlink": c_ext4.EXT4_FEATURE_RO_COMPAT_DIR_NLINK,
        "extra_isize": c_ext4.EXT4_FEATURE_RO_COMPAT_EXTRA_ISIZE,
        "quota": c_ext4.EXT4_FEATURE_RO_COMPAT_QUOTA,
        "bigalloc": c_ext4.EXT4_FEATURE_RO_COMPAT_BIGALLOC,
        "metadata_csum": c_ext4.EXT4_FEATURE_RO_COMPAT_METADATA_CSUM,
        "readonly": c_ext4.EXT4_FEATURE_RO_COMPAT_READONLY,
        "project": c_ext4.EXT4_FEATURE_RO_COMPAT_PROJECT,
    }
)

FEATURE_INCOMPAT: Mapping[str, int] = MappingProxyType(
    {
        "compression": c_ext4.EXT4_FEATURE_INCOMPAT_COMPRESSION,
        "filetype": c_ext4.EXT4_FEATURE_INCOMPAT_FILETYPE,
        "needs_recovery": c_ext4.EXT4_FEATURE_INCOMPAT_RECOVER,
        "journal_dev": c_ext4.EXT4_FEATURE_INCOMPAT_JOURNAL_DEV,
        "meta_bg": c_ext4.EXT4_FEATURE_INCOMPAT_META_BG,
        "extents": c_ext4.EXT4_FEATURE_INCOMPAT_EXTENTS,
        "64bit": c_ext4.EXT4_FEATURE_INCOMPAT_64BIT,
        "mmp": c_ext4.EXT4_FEATURE_INCOMPAT_MMP,
        "flex_bg": c_ext4.EXT4_FEATURE_INCOMPAT_FLEX_BG,
        "ea_inode": c_ext4.EXT4_FEATURE_INCOMPAT_EA_INODE,
        "dirdata": c_ext4.EXT4_FEATURE_INCOMPAT_DIRDATA,
        "csum_seed": c_ext4.EXT4_FEATURE_INCOMPAT_CSUM_SEED,
        "large_dir": c_ext4.EXT4_FEATURE_INCOMPAT_LARGEDIR,
        "inline_data": c_ext4.EXT4_FEATURE_INCOMPAT_INLINE_DATA,
        "encrypt": c_ext4.EXT4_FEATURE_INCOMPAT_ENCRYPT,
    }
)

# Sorted by name for deterministic output, the mappings above keep definition order
FEATURE_COMPAT_NAMES = tuple(sorted(FEATURE_COMPAT))
FEATURE_RO_COMPAT_NAMES = tuple(sorted(FEATURE_RO_COMPAT))
FEATURE_INCOMPAT_NAMES = tuple(sorted(FEATURE_INCOMPAT))


class FeatureCategory(NamedTuple):
    name: str
    title: str
    flags: Mapping[str, int]
    names: tuple[str, ...]
    field: str
    test: Callable[[Superblock, int], bool]


COMPAT = FeatureCategory(
    "compat",
    "Compatible",
    FEATURE_COMPAT,
    FEATURE_COMPAT_NAMES,
    "s_feature_compat",
    Superblock.has_compatible_feature,
)
RO_COMPAT = FeatureCategory(
    "ro_compat",
    "Read-Only Compatible",
    FEATURE_RO_COMPAT,
    FEATURE_RO_COMPAT_NAMES,
    "s_feature_ro_compat",
    Superblock.has_readonly_compatible_feature,
)
INCOMPAT = FeatureCategory(
    "incompat",
    "Incompatible",
    FEATURE_INCOMPAT,
    FEATURE_INCOMPAT_NAMES,
    "s_feature_incompat",
    Superblock.has_incompatible_feature,
)

CATEGORIES = (COMPAT, RO_COMPAT, INCOMPAT)
_CATEGORY_MAP = MappingProxyType({category.name: category for category in CATEGORIES})


def get_category(category: Union[str, FeatureCategory]) -> FeatureCategory:
    """Resolve a category by name (``compat``, ``ro_compat`` or ``incompat``)."""
    if isinstance(category, FeatureCategory):
        return category

    try:
        return _CATEGORY_MAP[category]
    except KeyError:
        raise ValueError(f"Unknown feature category: {category!r}")


def iter_features(sb: Superblock) -> Iterator[tuple[FeatureCategory, str, int, bool]]:
    """Yield every known feature flag and whether it is set.

    Categories are yielded as compatible, read-only compatible and incompatible, the flags
    within a category in sorted name order.

    Args:
        sb: The superblock to inspect.
    """
    for category in CATEGORIES:
        for name in category.names:
            mask = category.flags[name]
            yield category, name, mask, category.test(sb, mask)


def enabled_features(sb: Superblock, category: Union[str, FeatureCategory]) -> list[str]:
    """Return the sorted names of all known flags of a category that are set."""
    category = get_category(category)
    return [name for name in category.names if category.test(sb, category.flags[name])]


def unknown_features(sb: Superblock, category: Union[str, FeatureCategory]) -> int:
    """Return the bits of a category's feature set that have no name in the registry."""
    category = get_category(category)

    known = 0
    for mask in category.flags.values():
        known |= mask

    return getattr(sb, category.field) & ~known
