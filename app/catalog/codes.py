"""Unique SKU code generation.

Codes are opaque: ``{prefix}-{batch token}-{counter}``, for example
``SKU-9F2C41D07A3B-001``. The batch token is random per generator, so
two requests running at the same moment never share a prefix; the
counter is monotonic within one batch.
"""

import itertools
import secrets


class SKUCodeGenerator:
    """Issues collision-resistant codes for one generation batch.

    Example usage:
        codes = SKUCodeGenerator("SKU")
        codes.next_code()  # 'SKU-9F2C41D07A3B-001'
        codes.next_code()  # 'SKU-9F2C41D07A3B-002'
    """

    TOKEN_BYTES = 6

    def __init__(self, prefix: str = "SKU", token: str | None = None) -> None:
        """Initialize generator.

        Args:
            prefix: Leading code segment.
            token: Batch token; a random one is drawn when omitted.
        """
        self.prefix = prefix.strip().upper() or "SKU"
        self.token = (token or secrets.token_hex(self.TOKEN_BYTES)).upper()
        self._counter = itertools.count(1)

    def next_code(self) -> str:
        """Return the next code of this batch."""
        return f"{self.prefix}-{self.token}-{next(self._counter):03d}"
