"""Plain-text account persistence.

File layout::

    <balance> <realizedPnL>
    <holdingCount>
    <symbol>,<quantity>,<avgCost>
    ...  (holdingCount lines)

Floats are written in fixed-point with ``RECORD_FLOAT_PRECISION`` fractional
digits and holdings are sorted by symbol so saves are deterministic.

Loading degrades instead of failing: an unreadable header yields a zero-state
record, and an unparsable holding line is skipped on its own.
"""

from __future__ import annotations

import csv
import io
import math
import os
import tempfile
from pathlib import Path

from stocksim.core.constants import RECORD_FLOAT_PRECISION
from stocksim.core.exceptions import MalformedRecordError, PersistenceUnavailableError
from stocksim.core.logging import get_logger
from stocksim.core.types import AccountRecord, Holding
from stocksim.simulator.account import Account

log = get_logger(__name__)


def _fmt(value: float) -> str:
    return f"{value:.{RECORD_FLOAT_PRECISION}f}"


def _parse_float(text: str) -> float:
    value = float(text)
    if not math.isfinite(value):
        msg = f"non-finite value: {text!r}"
        raise ValueError(msg)
    return value


def _parse_header(line: str) -> tuple[float, float]:
    parts = line.split()
    if len(parts) != 2:
        raise MalformedRecordError(
            f"Header must hold balance and realized P&L, got {len(parts)} field(s)",
            context={"line": line},
        )
    try:
        balance, realized_pnl = _parse_float(parts[0]), _parse_float(parts[1])
    except ValueError as exc:
        raise MalformedRecordError(
            f"Header is not numeric: {line!r}",
            context={"line": line},
        ) from exc
    if balance < 0:
        raise MalformedRecordError(
            f"Balance must be non-negative, got {balance}",
            context={"line": line},
        )
    return balance, realized_pnl


def _parse_holding(line: str) -> Holding | None:
    """Parse one ``symbol,quantity,avgCost`` line; ``None`` if unusable."""
    try:
        fields = next(csv.reader([line], skipinitialspace=True), [])
    except csv.Error:
        return None
    fields = [f.strip().strip('"').strip() for f in fields]
    if len(fields) != 3 or not fields[0]:
        return None
    try:
        quantity = int(fields[1])
        avg_cost = _parse_float(fields[2])
    except ValueError:
        return None
    if quantity <= 0 or avg_cost <= 0:
        return None
    return Holding(symbol=fields[0], quantity=quantity, avg_cost=avg_cost)


def _holding_line(holding: Holding) -> str:
    buf = io.StringIO()
    csv.writer(buf, lineterminator="").writerow(
        [holding.symbol, holding.quantity, _fmt(holding.avg_cost)],
    )
    return buf.getvalue()


def dumps(record: AccountRecord) -> str:
    """Serialize *record* to the text layout."""
    holdings = sorted(record.holdings, key=lambda h: h.symbol)
    lines = [
        f"{_fmt(record.balance)} {_fmt(record.realized_pnl)}",
        str(len(holdings)),
    ]
    lines.extend(_holding_line(h) for h in holdings)
    return "\n".join(lines) + "\n"


def loads(text: str) -> AccountRecord:
    """Parse the text layout, degrading gracefully on malformed input.

    Raises:
        MalformedRecordError: If the header line is missing or unreadable.
    """
    lines = text.splitlines()
    if not lines:
        raise MalformedRecordError("Record is empty")

    balance, realized_pnl = _parse_header(lines[0])
    record = AccountRecord(balance=balance, realized_pnl=realized_pnl)

    if len(lines) < 2:
        log.warning("record_missing_holding_count")
        return record
    try:
        count = int(lines[1].strip())
    except ValueError:
        log.warning("record_holding_count_invalid", line=lines[1])
        return record
    if count < 0:
        log.warning("record_holding_count_invalid", line=lines[1])
        return record

    for lineno, line in enumerate(lines[2:2 + count], start=3):
        holding = _parse_holding(line)
        if holding is None:
            log.warning("record_line_skipped", lineno=lineno, line=line)
            continue
        record.holdings.append(holding)

    if len(lines) - 2 < count:
        log.warning("record_truncated", expected=count, found=len(lines) - 2)
    return record


class PersistenceStore:
    """Durable round-trip of one account's balance, realized P&L and holdings.

    Args:
        path: Location of the save file.  Parent directories are created
            on first save.
    """

    def __init__(self, path: Path | str) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def save(self, account: Account) -> Path:
        """Write *account* to disk atomically and return the file path.

        Raises:
            PersistenceUnavailableError: If the file cannot be written.
        """
        payload = dumps(account.to_record())
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{self._path.name}.", dir=self._path.parent,
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as fh:
                    fh.write(payload)
                os.replace(tmp_name, self._path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as exc:
            raise PersistenceUnavailableError(
                f"Failed to write save file {self._path}: {exc}",
                context={"path": str(self._path)},
            ) from exc

        log.info(
            "account_saved",
            account=account.name,
            path=str(self._path),
            n_holdings=len(account.portfolio),
        )
        return self._path

    def load(self) -> AccountRecord | None:
        """Read the saved record.

        Returns:
            ``None`` when no record exists (or it cannot be opened); a
            zero-state record when the header is unreadable; otherwise the
            parsed record with any bad holding lines dropped.
        """
        if not self._path.exists():
            log.info("no_saved_record", path=str(self._path))
            return None
        try:
            text = self._path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            log.warning("record_unreadable", path=str(self._path), error=str(exc))
            return None

        try:
            record = loads(text)
        except MalformedRecordError as exc:
            log.warning(
                "record_malformed",
                path=str(self._path),
                error=str(exc),
                **exc.context,
            )
            return AccountRecord()

        log.info(
            "account_loaded",
            path=str(self._path),
            balance=round(record.balance, 4),
            n_holdings=len(record.holdings),
        )
        return record
