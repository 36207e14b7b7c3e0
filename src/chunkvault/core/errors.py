"""
Error taxonomy for chunkvault.

Errors are fail-fast: every check runs before the first write of a call, and
an exception escaping a ledger transaction discards its pending writes.
"""


class VaultError(Exception):
    """Base class for all vault errors."""


class NotInitialized(VaultError):
    """No administrator principal has been configured yet."""

    def __init__(self):
        super().__init__("Not initialized")


class AlreadyInitialized(VaultError):
    """The vault already has an administrator."""

    def __init__(self):
        super().__init__("Already initialized")


class Unauthorized(VaultError):
    """The caller is not the administrator."""

    def __init__(self, caller):
        self.caller = caller
        super().__init__(f"Unauthorized caller: {caller!r}")


class NotFound(VaultError):
    """A chunk required by the operation does not exist."""

    def __init__(self, collection: str, chunk_id: str):
        self.collection = collection
        self.chunk_id = chunk_id
        super().__init__(f"Entry not found: {collection}/{chunk_id}")


class SizeMismatch(VaultError):
    """Batch argument sequences have unequal lengths."""

    def __init__(self, *lengths: int):
        self.lengths = lengths
        sizes = "/".join(str(n) for n in lengths)
        super().__init__(f"Mismatched batch sizes: {sizes}")


class LedgerCorruptError(VaultError):
    """A persisted ledger file failed header or checksum validation."""
