class GenMemoError(Exception):
    """Base class for errors raised inside the GenMemo core."""


class LedgerDecodeError(GenMemoError):
    """A stored ledger record could not be decoded into a LearnableItem."""


class WireDecodeError(GenMemoError):
    """A remote payload did not match the expected wire format."""
