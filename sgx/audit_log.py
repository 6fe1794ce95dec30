"""
audit_log.py - Per-market audit file

Every market writes one text file of the form

    <NAME>|<Y>::<Mo>::<D>::<H>::<Mi>::<S>::<Ns>|<CODE>

Opening an AuditLog truncates the file and writes the market-initialization
block; every later line is appended. The file is write-only telemetry:
nothing in the package reads it back.

Write failures are reported through logging and never raised, so an
unwritable path cannot turn a successful trade into an error.

Usage:
    audit = AuditLog(Path("log_SGX.txt"), "SGX")
    audit.log_market_init(labels)
    audit.log_buy(token, ok=True)
"""

from __future__ import annotations
from datetime import datetime
from decimal import Decimal
from pathlib import Path
from typing import Iterable, Optional, Union
import logging
import time

from .core import GoodKind, GoodLabel

logger = logging.getLogger(__name__)


def _fmt(value: Decimal) -> str:
    return f"{value.normalize():f}"


def _sci(value: Decimal) -> str:
    """Signed scientific notation without padding: 1000 -> +1e3, 1234.5 -> +1.2345e3."""
    if value == 0:
        return "+0e0"
    sign, digits, _ = value.normalize().as_tuple()
    mantissa = str(digits[0])
    if len(digits) > 1:
        mantissa += "." + "".join(str(d) for d in digits[1:])
    return f"{'-' if sign else '+'}{mantissa}e{value.adjusted()}"


class AuditLog:
    """
    Append-only audit trail for one market.

    Args:
        path: File to write
        market_name: Name stamped on every line
    """

    def __init__(self, path: Union[str, Path], market_name: str):
        self.path = Path(path)
        self.market_name = market_name

    # ========================================================================
    # LINE FORMATTING
    # ========================================================================

    def _prefix(self, now_ns: Optional[int] = None) -> str:
        if now_ns is None:
            now_ns = time.time_ns()
        seconds, nanos = divmod(now_ns, 1_000_000_000)
        now = datetime.fromtimestamp(seconds)
        return (
            f"{self.market_name}|{now.year}::{now.month}::{now.day}::"
            f"{now.hour}::{now.minute}::{now.second}::{nanos}|"
        )

    def _write(self, code: str, mode: str = "a") -> None:
        line = f"{self._prefix()}{code}\n"
        try:
            with self.path.open(mode, encoding="utf-8") as fh:
                fh.write(line)
        except OSError as e:
            logger.warning("Could not write audit line to %s: %s", self.path, e)

    # ========================================================================
    # INITIALIZATION
    # ========================================================================

    def log_market_init(self, labels: Iterable[GoodLabel]) -> None:
        """Truncate the file and write the opening inventory."""
        quantities = {label.kind: label.quantity for label in labels}
        body = "\n".join(
            f"{kind}:{_sci(quantities.get(kind, Decimal('0')))}" for kind in GoodKind
        )
        self._write(
            f"\nMARKET_INITIALIZATION\n{body}\nEND_MARKET_INITIALIZATION",
            mode="w",
        )

    # ========================================================================
    # QUOTES
    # ========================================================================

    def log_quote_buy_error(self, kind: GoodKind, quantity: Decimal) -> None:
        self._write(f"GET_BUY_PRICE-KIND:{kind}-QUANTITY:{_fmt(quantity)}-ERROR")

    def log_quote_sell_error(self, kind: GoodKind, quantity: Decimal) -> None:
        self._write(f"GET_SELL_PRICE-KIND:{kind}-QUANTITY:{_fmt(quantity)}-ERROR")

    # ========================================================================
    # LOCKS
    # ========================================================================

    def log_lock_buy(
        self,
        trader_name: str,
        kind: GoodKind,
        quantity: Decimal,
        bid: Decimal,
        token: Optional[str],
    ) -> None:
        """Record a lock_buy attempt; token None marks a rejection."""
        outcome = f"TOKEN:{token}" if token is not None else "ERROR"
        self._write(
            f"LOCK_BUY-{trader_name}-KIND_TO_BUY:{kind}-QUANTITY_TO_BUY:{_fmt(quantity)}"
            f"-BID:{_fmt(bid)}-{outcome}"
        )

    def log_lock_sell(
        self,
        trader_name: str,
        kind: GoodKind,
        quantity: Decimal,
        offer: Decimal,
        token: Optional[str],
    ) -> None:
        """Record a lock_sell attempt; token None marks a rejection."""
        outcome = f"TOKEN:{token}" if token is not None else "ERROR"
        self._write(
            f"LOCK-SELL-{trader_name}-KIND_TO_SELL:{kind}-QUANTITY_TO_SELL:{_fmt(quantity)}"
            f"-OFFER:{_fmt(offer)}-{outcome}"
        )

    # ========================================================================
    # REDEMPTIONS
    # ========================================================================

    def log_buy(self, token: str, ok: bool) -> None:
        self._write(f"BUY-TOKEN:{token}-{'OK' if ok else 'ERROR'}")

    def log_sell(self, token: str, ok: bool) -> None:
        self._write(f"SELL-TOKEN:{token}-{'OK' if ok else 'ERROR'}")

    def __repr__(self) -> str:
        return f"AuditLog({self.market_name!r}, {str(self.path)!r})"
