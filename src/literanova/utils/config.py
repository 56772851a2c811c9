# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Tsar Studio
# Part of LiteraNova — see LICENSE and TRADEMARKS.md
# Refs: EIP-55; EIP-137-ENS; EIP-191

'''
=============================================================================
 --------------------- LOCAL CLIENT SETTINGS (NOT SHARED) ---------------------
=============================================================================

Nothing below is shared between parties. Every value only changes how this
local client stores, resolves and displays data.

  1) STORAGE SLOT NAMES
   - SLOT_* values are the on-disk keys of existing stores. Renaming one
     orphans the data stored under the old name.

  2) SESSION
   - SESSION_TTL_MS controls how long an unlock signature stays valid.

  3) ATTACHMENTS
   - ATTACH_ALLOWED_MIME, ATTACH_MAX_BYTES

=============================================================================
'''

import os
import appdirs


# =============================================================================
# 1. MODE & APPLICATION
# =============================================================================
# ---- RUNTIME PROFILE ----
MODE   = "dev"  # default runtime profile, switch to "prod" for packaged builds
IS_DEV = (MODE.lower() == "dev")  # cached boolean to simplify dev/prod toggles

# ---- APP METADATA ----
APP_NAME      = "LiteraNova"  # display name used for user data directories
APP_AUTHOR    = "TsarStudio"  # vendor string passed into platform dir helpers
USER_DATA_DIR = appdirs.user_data_dir(APP_NAME, APP_AUTHOR)  # OS-specific data folder resolved via appdirs


# =============================================================================
# 2. FILESYSTEM LAYOUT
# =============================================================================
DATA_DIR        = os.environ.get("LITERANOVA_HOME") or USER_DATA_DIR  # root folder for every local file
STORE_DIR       = os.path.join(DATA_DIR, "store")  # one JSON file per slot when KV_BACKEND == "json"
DB_DIR          = os.path.join(DATA_DIR, "db")  # LMDB root folder
SIGNER_KEY_PATH = os.path.join(DATA_DIR, "signer_key.json")  # encrypted secp256k1 key of the local signer


# =============================================================================
# 3. STORAGE
# =============================================================================
# ---- BACKEND ----
KV_BACKEND         = "json"  # "json" | "lmdb" | "memory"
LMDB_DB_NAME       = "literanova"  # named sub-database inside the LMDB env
LMDB_MAP_SIZE_INIT = 16 * 1024 * 1024  # initial LMDB map size (16 MiB)
LMDB_MAP_SIZE_MAX  = 4 * 1024 * 1024 * 1024  # upper LMDB map cap (4 GiB)

# ---- SLOTS ----
SLOT_THREADS   = "literanova_threads_v0"  # {threadId: Thread}
SLOT_INBOX     = "literanova_inbox_v0"  # [InboxEntry], newest first
SLOT_FAVORITES = "literanova_favorites_v0"  # [AddressEntry]
SLOT_CONTACTS  = "literanova_contacts_v0"  # [AddressEntry]
SLOT_BLOCKED   = "literanova_blocked_v0"  # [BlockedEntry]
SLOT_REQUESTS  = "literanova_requests_v0"  # [Request], newest first
SLOT_SESSION   = "literanova_session_v0"  # Session or null
SLOTS = (
    SLOT_THREADS, SLOT_INBOX, SLOT_FAVORITES, SLOT_CONTACTS,
    SLOT_BLOCKED, SLOT_REQUESTS, SLOT_SESSION,
)


# =============================================================================
# 4. ADDRESSING
# =============================================================================
ADDRESS_PREFIX   = "0x"  # literal account ids start with this prefix
ADDRESS_HEX_LEN  = 40  # hex digits after the prefix
NAME_SEPARATOR   = "."  # anything containing this is treated as a resolvable name
SHORT_ADDR_HEAD  = 6  # chars kept at the front of a shortened account id (prefix included)
SHORT_ADDR_TAIL  = 4  # chars kept at the end of a shortened account id
UNKNOWN_PARTY    = "unknown"  # placeholder when a thread lost its second participant


# =============================================================================
# 5. NAME RESOLUTION
# =============================================================================
ENS_RPC_URLS = (
    "https://ethereum.publicnode.com",
    "https://rpc.ankr.com/eth",
    "https://cloudflare-eth.com",
)  # tried strictly in order, first positive answer wins
ENS_RPC_TIMEOUT = 8.0  # seconds per HTTP attempt, a timeout counts as that endpoint failing


# =============================================================================
# 6. SESSION
# =============================================================================
SESSION_TTL_MS      = 12 * 60 * 60 * 1000  # unlock validity window (12h)
SESSION_NONCE_BYTES = 16  # random bytes embedded in each unlock challenge
SESSION_CHALLENGE   = "LiteraNova unlock\nAccount: {account}\nNonce: {nonce}\nIssued: {issued}"


# =============================================================================
# 7. ATTACHMENTS
# =============================================================================
ATTACH_ALLOWED_MIME = "application/pdf"  # the single accepted document type
ATTACH_MAX_BYTES    = 5 * 1024 * 1024  # 5 MiB ceiling, inclusive


# =============================================================================
# 8. ADDRESS PANE
# =============================================================================
PRESET_ADDRESSES = (
    "neo.eth",
    "trinity.eth",
    "morpheus.eth",
    "oracle.eth",
    "smith.eth",
)  # sample recipients offered before anything is saved


# =============================================================================
# 9. LOCAL SIGNER
# =============================================================================
SIGNER_KDF_N = 2**15  # scrypt cost used to encrypt the local signing key
SIGNER_KDF_R = 8
SIGNER_KDF_P = 1


# =============================================================================
# 10. LOGGING
# =============================================================================
# ---- BASE OUTPUT ----
LOG_PATH             = os.path.join(DATA_DIR, "logging", "literanova.log")  # canonical log file path before format-specific override
LOG_SHOW_PROCESS     = False  # include process metadata in log context when True
LOG_PROC_PLACEHOLDER = "-"  # value used when process info is hidden

# ---- MODE PROFILES ----
if IS_DEV:
    # ---- DEV PROFILE ----
    LOG_LEVEL                   = "DEBUG"  # verbose logging for development
    LOG_FORMAT                  = "plain"  # plain text logs ease local debugging
    LOG_TO_CONSOLE              = False  # the CLI prints status lines, keep stdout clean
    LOG_RATE_LIMIT_SECONDS      = 0.0  # disable console throttling in dev
    LOG_FILE_RATE_LIMIT_SECONDS = 0.0  # disable file throttling in dev
    LOG_ROTATE_MAX_BYTES        = 5_000_000  # rollover log files after ~5MB in dev
    LOG_BACKUP_COUNT            = 3  # retain a few rotated dev log files
else:
    # ---- PROD PROFILE ----
    LOG_LEVEL                   = "INFO"  # balanced verbosity for production
    LOG_FORMAT                  = "json"  # JSON logs simplify ingestion in prod
    LOG_TO_CONSOLE              = False  # suppress console spam
    LOG_RATE_LIMIT_SECONDS      = 2.0  # throttle console spam in prod
    LOG_FILE_RATE_LIMIT_SECONDS = 1.0  # throttle file spam in prod
    LOG_ROTATE_MAX_BYTES        = 10_000_000  # rollover log files after ~10MB in prod
    LOG_BACKUP_COUNT            = 7  # keep more history in prod

# ---- LOG PATH NORMALIZATION ----
_LOG_BASE = os.path.join(DATA_DIR, "logging", "literanova")  # base path used to pick extension
if str(LOG_FORMAT).lower().strip() == "json":
    LOG_PATH = _LOG_BASE + ".jsonl"  # JSON lines extension to aid parsing
else:
    LOG_PATH = _LOG_BASE + ".log"  # plain-text log extension fallback
