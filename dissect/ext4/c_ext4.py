from dissect.cstruct import cstruct

ext4_def = """
/* The first superblock follows the 1024 bytes reserved for boot code */
#define EXT4_SUPERBLOCK_OFFSET          1024
#define EXT4_SUPERBLOCK_SIZE            1024
#define EXT4_SUPER_MAGIC                0xEF53

#define EXT4_MIN_BLOCK_LOG_SIZE         10

#define EXT4_GOOD_OLD_REV               0   /* The good old (original) format */
#define EXT4_DYNAMIC_REV                1   /* V2 format w/ dynamic inode sizes */

#define EXT4_GOOD_OLD_FIRST_INO         11
#define EXT4_GOOD_OLD_INODE_SIZE        128

#define EXT4_MIN_DESC_SIZE              32
#define EXT4_MIN_DESC_SIZE_64BIT        64

/* s_state */
#define EXT4_VALID_FS                   0x0001  /* Unmounted cleanly */
#define EXT4_ERROR_FS                   0x0002  /* Errors detected */
#define EXT4_ORPHAN_FS                  0x0004  /* Orphans being recovered */

/* s_errors */
#define EXT4_ERRORS_CONTINUE            1       /* Continue execution */
#define EXT4_ERRORS_RO                  2       /* Remount fs read-only */
#define EXT4_ERRORS_PANIC               3       /* Panic */

/* s_creator_os */
#define EXT4_OS_LINUX                   0
#define EXT4_OS_HURD                    1
#define EXT4_OS_MASIX                   2
#define EXT4_OS_FREEBSD                 3
#define EXT4_OS_LITES                   4

/* s_feature_compat */
#define EXT4_FEATURE_COMPAT_DIR_PREALLOC        0x0001
#define EXT4_FEATURE_COMPAT_IMAGIC_INODES       0x0002
#define EXT4_FEATURE_COMPAT_HAS_JOURNAL         0x0004
#define EXT4_FEATURE_COMPAT_EXT_ATTR            0x0008
#define EXT4_FEATURE_COMPAT_RESIZE_INODE        0x0010
#define EXT4_FEATURE_COMPAT_DIR_INDEX           0x0020
#define EXT4_FEATURE_COMPAT_SPARSE_SUPER2       0x0200

/* s_feature_ro_compat */
#define EXT4_FEATURE_RO_COMPAT_SPARSE_SUPER     0x0001
#define EXT4_FEATURE_RO_COMPAT_LARGE_FILE       0x0002
#define EXT4_FEATURE_RO_COMPAT_BTREE_DIR        0x0004
#define EXT4_FEATURE_RO_COMPAT_HUGE_FILE        0x0008
#define EXT4_FEATURE_RO_COMPAT_GDT_CSUM         0x0010
#define EXT4_FEATURE_RO_COMPAT_DIR_NLINK        0x0020
#define EXT4_FEATURE_RO_COMPAT_EXTRA_ISIZE      0x0040
#define EXT4_FEATURE_RO_COMPAT_QUOTA            0x0100
#define EXT4_FEATURE_RO_COMPAT_BIGALLOC         0x0200
#define EXT4_FEATURE_RO_COMPAT_METADATA_CSUM    0x0400
#define EXT4_FEATURE_RO_COMPAT_READONLY         0x1000
#define EXT4_FEATURE_RO_COMPAT_PROJECT          0x2000

/* s_feature_incompat */
#define EXT4_FEATURE_INCOMPAT_COMPRESSION       0x0001
#define EXT4_FEATURE_INCOMPAT_FILETYPE          0x0002
#define EXT4_FEATURE_INCOMPAT_RECOVER           0x0004  /* Needs recovery */
#define EXT4_FEATURE_INCOMPAT_JOURNAL_DEV       0x0008  /* Journal device */
#define EXT4_FEATURE_INCOMPAT_META_BG           0x0010
#define EXT4_FEATURE_INCOMPAT_EXTENTS           0x0040  /* extents support */
#define EXT4_FEATURE_INCOMPAT_64BIT             0x0080
#define EXT4_FEATURE_INCOMPAT_MMP               0x0100
#define EXT4_FEATURE_INCOMPAT_FLEX_BG           0x0200
#define EXT4_FEATURE_INCOMPAT_EA_INODE          0x0400  /* EA in inode */
#define EXT4_FEATURE_INCOMPAT_DIRDATA           0x1000  /* data in dirent */
#define EXT4_FEATURE_INCOMPAT_CSUM_SEED         0x2000
#define EXT4_FEATURE_INCOMPAT_LARGEDIR          0x4000  /* >2GB or 3-lvl htree */
#define EXT4_FEATURE_INCOMPAT_INLINE_DATA       0x8000  /* data in inode */
#define EXT4_FEATURE_INCOMPAT_ENCRYPT           0x10000

/* s_def_hash_version */
#define DX_HASH_LEGACY                  0
#define DX_HASH_HALF_MD4                1
#define DX_HASH_TEA                     2
#define DX_HASH_LEGACY_UNSIGNED         3
#define DX_HASH_HALF_MD4_UNSIGNED       4
#define DX_HASH_TEA_UNSIGNED            5
#define DX_HASH_SIPHASH                 6

/* s_checksum_type */
#define EXT4_CRC32C_CHKSUM              1

/*
 * Structure of the super block, see fs/ext4/ext4.h
 */
struct ext4_super_block {
/*00*/  uint32      s_inodes_count;             /* Inodes count */
        uint32      s_blocks_count_lo;          /* Blocks count */
        uint32      s_r_blocks_count_lo;        /* Reserved blocks count */
        uint32      s_free_blocks_count_lo;     /* Free blocks count */
/*10*/  uint32      s_free_inodes_count;        /* Free inodes count */
        uint32      s_first_data_block;         /* First Data Block */
        uint32      s_log_block_size;           /* Block size */
        uint32      s_log_cluster_size;         /* Allocation cluster size */
/*20*/  uint32      s_blocks_per_group;         /* # Blocks per group */
        uint32      s_clusters_per_group;       /* # Clusters per group */
        uint32      s_inodes_per_group;         /* # Inodes per group */
        uint32      s_mtime;                    /* Mount time */
/*30*/  uint32      s_wtime;                    /* Write time */
        uint16      s_mnt_count;                /* Mount count */
        uint16      s_max_mnt_count;            /* Maximal mount count */
        uint16      s_magic;                    /* Magic signature */
        uint16      s_state;                    /* File system state */
        uint16      s_errors;                   /* Behaviour when detecting errors */
        uint16      s_minor_rev_level;          /* minor revision level */
/*40*/  uint32      s_lastcheck;                /* time of last check */
        uint32      s_checkinterval;            /* max. time between checks */
        uint32      s_creator_os;               /* OS */
        uint32      s_rev_level;                /* Revision level */
/*50*/  uint16      s_def_resuid;               /* Default uid for reserved blocks */
        uint16      s_def_resgid;               /* Default gid for reserved blocks */
    /*
     * These fields are for EXT4_DYNAMIC_REV superblocks only.
     *
     * Note: the difference between the compatible feature set and
     * the incompatible feature set is that if there is a bit set
     * in the incompatible feature set that the kernel doesn't
     * know about, it should refuse to mount the filesystem.
     */
        uint32      s_first_ino;                /* First non-reserved inode */
        uint16      s_inode_size;               /* size of inode structure */
        uint16      s_block_group_nr;           /* block group # of this superblock */
        uint32      s_feature_compat;           /* compatible feature set */
/*60*/  uint32      s_feature_incompat;         /* incompatible feature set */
        uint32      s_feature_ro_compat;        /* readonly-compatible feature set */
/*68*/  char        s_uuid[16];                 /* 128-bit uuid for volume */
/*78*/  char        s_volume_name[16];          /* volume name */
/*88*/  char        s_last_mounted[64];         /* directory where last mounted */
/*C8*/  uint32      s_algorithm_usage_bitmap;   /* For compression */
    /*
     * Performance hints. Directory preallocation should only
     * happen if the EXT4_FEATURE_COMPAT_DIR_PREALLOC flag is on.
     */
        uint8       s_prealloc_blocks;          /* Nr of blocks to try to preallocate*/
        uint8       s_prealloc_dir_blocks;      /* Nr to preallocate for dirs */
        uint16      s_reserved_gdt_blocks;      /* Per group desc for online growth */
    /*
     * Journaling support valid if EXT4_FEATURE_COMPAT_HAS_JOURNAL set.
     */
/*D0*/  char        s_journal_uuid[16];         /* uuid of journal superblock */
/*E0*/  uint32      s_journal_inum;             /* inode number of journal file */
        uint32      s_journal_dev;              /* device number of journal file */
        uint32      s_last_orphan;              /* start of list of inodes to delete */
        char        s_hash_seed[16];            /* HTREE hash seed */
        uint8       s_def_hash_version;         /* Default hash version to use */
        uint8       s_jnl_backup_type;
        uint16      s_desc_size;                /* size of group descriptor */
/*100*/ uint32      s_default_mount_opts;
        uint32      s_first_meta_bg;            /* First metablock block group */
        uint32      s_mkfs_time;                /* When the filesystem was created */
        uint32      s_jnl_blocks[17];           /* Backup of the journal inode */
    /* 64bit support valid if EXT4_FEATURE_INCOMPAT_64BIT */
/*150*/ uint32      s_blocks_count_hi;          /* Blocks count */
        uint32      s_r_blocks_count_hi;        /* Reserved blocks count */
        uint32      s_free_blocks_count_hi;     /* Free blocks count */
        uint16      s_min_extra_isize;          /* All inodes have at least # bytes */
        uint16      s_want_extra_isize;         /* New inodes should reserve # bytes */
/*160*/ uint32      s_flags;                    /* Miscellaneous flags */
        uint16      s_raid_stride;              /* RAID stride */
        uint16      s_mmp_update_interval;      /* # seconds to wait in MMP checking */
        uint64      s_mmp_block;                /* Block for multi-mount protection */
/*170*/ uint32      s_raid_stripe_width;        /* blocks on all data disks (N*stride)*/
        uint8       s_log_groups_per_flex;      /* FLEX_BG group size */
        uint8       s_checksum_type;            /* metadata checksum algorithm used */
        uint8       s_encryption_level;         /* versioning level for encryption */
        uint8       s_reserved_pad;             /* Padding to next 32bits */
        uint64      s_kbytes_written;           /* nr of lifetime kilobytes written */
/*180*/ uint32      s_snapshot_inum;            /* Inode number of active snapshot */
        uint32      s_snapshot_id;              /* sequential ID of active snapshot */
        uint64      s_snapshot_r_blocks_count;  /* reserved blocks for active snapshot's future use */
/*190*/ uint32      s_snapshot_list;            /* inode number of the head of the on-disk snapshot list */
        uint32      s_error_count;              /* number of fs errors */
        uint32      s_first_error_time;         /* first time an error happened */
        uint32      s_first_error_ino;          /* inode involved in first error */
/*1A0*/ uint64      s_first_error_block;        /* block involved of first error */
        char        s_first_error_func[32];     /* function where the error happened */
/*1C8*/ uint32      s_first_error_line;         /* line number where error happened */
        uint32      s_last_error_time;          /* most recent time of an error */
        uint32      s_last_error_ino;           /* inode involved in last error */
        uint32      s_last_error_line;          /* line number where error happened */
/*1D8*/ uint64      s_last_error_block;         /* block involved of last error */
        char        s_last_error_func[32];      /* function where the error happened */
/*200*/ char        s_mount_opts[64];
/*240*/ uint32      s_usr_quota_inum;           /* inode for tracking user quota */
        uint32      s_grp_quota_inum;           /* inode for tracking group quota */
        uint32      s_overhead_clusters;        /* overhead blocks/clusters in fs */
        uint32      s_backup_bgs[2];            /* groups with sparse_super2 SBs */
        uint8       s_encrypt_algos[4];         /* Encryption algorithms in use  */
        char        s_encrypt_pw_salt[16];      /* Salt used for string2key algorithm */
/*268*/ uint32      s_lpf_ino;                  /* Location of the lost+found inode */
        uint32      s_prj_quota_inum;           /* inode for tracking project quota */
/*270*/ uint32      s_checksum_seed;            /* crc32c(uuid) if csum_seed set */
        uint8       s_wtime_hi;
        uint8       s_mtime_hi;
        uint8       s_mkfs_time_hi;
        uint8       s_lastcheck_hi;
        uint8       s_first_error_time_hi;
        uint8       s_last_error_time_hi;
        uint8       s_pad[2];
/*27C*/ uint32      s_reserved[96];             /* Padding to the end of the block */
/*3FC*/ uint32      s_checksum;                 /* crc32c(superblock) */
};
"""

c_ext4 = cstruct().load(ext4_def)

STATE_NAMES = {
    c_ext4.EXT4_VALID_FS: "clean",
    c_ext4.EXT4_ERROR_FS: "errors",
    c_ext4.EXT4_ORPHAN_FS: "orphans",
}

ERRORS_NAMES = {
    c_ext4.EXT4_ERRORS_CONTINUE: "Continue",
    c_ext4.EXT4_ERRORS_RO: "Remount read-only",
    c_ext4.EXT4_ERRORS_PANIC: "Panic",
}

CREATOR_OS_NAMES = {
    c_ext4.EXT4_OS_LINUX: "Linux",
    c_ext4.EXT4_OS_HURD: "Hurd",
    c_ext4.EXT4_OS_MASIX: "Masix",
    c_ext4.EXT4_OS_FREEBSD: "FreeBSD",
    c_ext4.EXT4_OS_LITES: "Lites",
}

REVISION_NAMES = {
    c_ext4.EXT4_GOOD_OLD_REV: "original",
    c_ext4.EXT4_DYNAMIC_REV: "dynamic",
}

HASH_VERSION_NAMES = {
    c_ext4.DX_HASH_LEGACY: "legacy",
    c_ext4.DX_HASH_HALF_MD4: "half_md4",
    c_ext4.DX_HASH_TEA: "tea",
    c_ext4.DX_HASH_LEGACY_UNSIGNED: "legacy_unsigned",
    c_ext4.DX_HASH_HALF_MD4_UNSIGNED: "half_md4_unsigned",
    c_ext4.DX_HASH_TEA_UNSIGNED: "tea_unsigned",
    c_ext4.DX_HASH_SIPHASH: "siphash",
}

CHECKSUM_TYPE_NAMES = {
    c_ext4.EXT4_CRC32C_CHKSUM: "crc32c",
}
