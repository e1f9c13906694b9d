"""
Function-Name Recognizer
========================

Decides in O(1) whether an identifier is one of the kernel's logging or
diagnostic functions.

The names live in a table indexed by ``djb2a(name) % width``, where the
width is the smallest value (starting at a floor) for which no two names
share a slot. Because the width is chosen to be collision-free, a lookup
is a single hash plus one exact string comparison: an identifier is
recognized only if the name stored in its slot is exactly equal to it.

Example Usage
-------------
>>> table = FunctionNameTable.build()
>>> "dev_err" in table
True
>>> "dev_errr" in table
False
"""

import functools
import logging
from typing import Iterable, Optional

from kernelscan.errors import HashTableError


logger = logging.getLogger(__name__)


# Smallest table width tried
TABLE_FLOOR = 458

# Widths at or above this are never tried
TABLE_CEILING = 5000


# =============================================================================
# Recognized Function Names
# =============================================================================

KERNEL_LOG_FUNCTIONS: tuple[str, ...] = (
    # Generic printk family
    "printk",
    "printf",
    "early_printk",
    "vprintk_emit",
    "vprintk",
    "printk_emit",
    "printk_once",
    "printk_deferred",
    "printk_deferred_once",

    # pr_* helpers
    "pr_emerg",
    "pr_alert",
    "pr_crit",
    "pr_err",
    "pr_warning",
    "pr_warn",
    "pr_notice",
    "pr_info",
    "pr_cont",
    "pr_devel",
    "pr_debug",
    "pr_emerg_once",
    "pr_alert_once",
    "pr_crit_once",
    "pr_err_once",
    "pr_warning_once",
    "pr_warn_once",
    "pr_notice_once",
    "pr_info_once",
    "pr_cont_once",
    "pr_devel_once",
    "pr_debug_once",
    "dynamic_pr_debug",

    # Device logging
    "dev_vprintk_emit",
    "dev_printk_emit",
    "dev_printk",
    "dev_emerg",
    "dev_alert",
    "dev_crit",
    "dev_err",
    "dev_warn",
    "dev_dbg",
    "dev_notice",
    "dev_level_once",
    "dev_emerg_once",
    "dev_alert_once",
    "dev_crit_once",
    "dev_err_once",
    "dev_warn_once",
    "dev_notice_once",
    "dev_info_once",
    "dev_dbg_once",
    "dev_level_ratelimited",
    "dev_emerg_ratelimited",
    "dev_alert_ratelimited",
    "dev_crit_ratelimited",
    "dev_err_ratelimited",
    "dev_warn_ratelimited",
    "dev_notice_ratelimited",
    "dev_info_ratelimited",
    "dbg",

    # ACPICA diagnostics
    "ACPI_ERROR",
    "ACPI_INFO",
    "ACPI_WARNING",
    "ACPI_EXCEPTION",
    "ACPI_BIOS_WARNING",
    "ACPI_BIOS_ERROR",
    "ACPI_ERROR_METHOD",
    "ACPI_DEBUG_PRINT",
    "ACPI_DEBUG_PRINT_RAW",
    "DEBUG",
)


def djb2a(text: str) -> int:
    """
    Dan Bernstein's string hash, xor variant: h = (h * 33) ^ c.

    The result is truncated to 32 bits after every step, like an
    unsigned int accumulator in C.
    """
    h = 5381
    for ch in text:
        h = ((h * 33) ^ ord(ch)) & 0xFFFFFFFF
    return h


# =============================================================================
# Hash Table
# =============================================================================

class FunctionNameTable:
    """
    Immutable collision-free hash table of function names.

    Build it with FunctionNameTable.build(); the constructor takes an
    already validated width and slot tuple.

    Attributes:
        width: Number of slots; hash values are reduced modulo this
        slots: One entry per slot, the name stored there or None
    """

    def __init__(self, width: int, slots: tuple[Optional[str], ...]):
        self.width = width
        self.slots = slots

    @classmethod
    def build(
        cls,
        names: Iterable[str] = KERNEL_LOG_FUNCTIONS,
        floor: int = TABLE_FLOOR,
        ceiling: int = TABLE_CEILING,
    ) -> "FunctionNameTable":
        """
        Find the smallest collision-free width and fill the table.

        Args:
            names: Function names to recognize
            floor: First width to try
            ceiling: Exclusive upper bound on the width

        Raises:
            HashTableError: If every width in [floor, ceiling) collides
        """
        names = tuple(dict.fromkeys(names))
        hashes = [djb2a(name) for name in names]

        for width in range(floor, ceiling):
            slots: list[Optional[str]] = [None] * width
            for name, h in zip(names, hashes):
                index = h % width
                if slots[index] is not None:
                    break
                slots[index] = name
            else:
                logger.debug(f"Function name table: {len(names)} names, width {width}")
                return cls(width, tuple(slots))

        raise HashTableError(floor, ceiling, len(names))

    def lookup(self, identifier: str) -> Optional[str]:
        """Return the stored name if identifier is recognized, else None."""
        name = self.slots[djb2a(identifier) % self.width]
        if name is not None and name == identifier:
            return name
        return None

    def __contains__(self, identifier: str) -> bool:
        return self.lookup(identifier) is not None

    def __len__(self) -> int:
        return len(self.names)

    @property
    def names(self) -> tuple[str, ...]:
        """The recognized names, in slot order."""
        return tuple(name for name in self.slots if name is not None)


@functools.lru_cache(maxsize=None)
def default_table() -> FunctionNameTable:
    """Return the process-wide table for KERNEL_LOG_FUNCTIONS."""
    return FunctionNameTable.build()
