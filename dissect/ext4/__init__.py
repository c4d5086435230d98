from dissect.ext4.dump import dump
from dissect.ext4.exceptions import (
    Error,
    InvalidSuperblockError,
    ReadError,
)
from dissect.ext4.features import (
    FEATURE_COMPAT,
    FEATURE_INCOMPAT,
    FEATURE_RO_COMPAT,
    iter_features,
)
from dissect.ext4.superblock import Superblock, decode, decode_volume

__all__ = [
    "FEATURE_COMPAT",
    "FEATURE_INCOMPAT",
    "FEATURE_RO_COMPAT",
    "Error",
    "InvalidSuperblockError",
    "ReadError",
    "Superblock",
    "decode",
    "decode_volume",
    "dump",
    "iter_features",
]
