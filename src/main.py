import os
import sys
import logging
from decimal import Decimal, ROUND_HALF_EVEN
from typing import Iterable, Optional, TextIO

from models import ClientAccount
from payments_engine import PaymentsEngine

logger = logging.getLogger(__name__)

OUTPUT_PRECISION = Decimal("0.0001")
CSV_HEADER = "client,available,held,total,locked"


def resolve_log_level(name: str) -> Optional[int]:
    """Map a LOG_LEVEL value such as "info" to a logging level, or None if unknown."""
    level = logging.getLevelName(name.strip().upper())
    return level if isinstance(level, int) else None


def configure_logging() -> None:
    raw_level = os.environ.get("LOG_LEVEL", "WARNING")
    level = resolve_log_level(raw_level)
    logging.basicConfig(
        level=logging.WARNING if level is None else level,
        format="%(levelname)s: %(message)s",
        stream=sys.stderr,
    )
    if level is None:
        logger.warning(f"Unknown LOG_LEVEL {raw_level!r}, using WARNING")


def format_decimal(value: Decimal) -> str:
    """Round to 4 decimal places and drop trailing zeros."""
    normalized = value.quantize(OUTPUT_PRECISION, rounding=ROUND_HALF_EVEN).normalize()
    return f"{normalized:f}"


def write_accounts(accounts: Iterable[ClientAccount], out: TextIO) -> None:
    print(CSV_HEADER, file=out)
    for account in sorted(accounts, key=lambda a: a.client_id):
        print(
            f"{account.client_id},"
            f"{format_decimal(account.available)},"
            f"{format_decimal(account.held)},"
            f"{format_decimal(account.total)},"
            f"{str(account.locked).lower()}",
            file=out,
        )


def main(argv=None) -> int:
    argv = sys.argv[1:] if argv is None else argv
    if len(argv) != 1:
        print("Usage: python main.py <input.csv>", file=sys.stderr)
        return 1

    configure_logging()

    filepath = argv[0]
    engine = PaymentsEngine()
    try:
        accounts = engine.process_file(filepath)
    except OSError as e:
        logger.error(f"Cannot read {filepath}: {e}")
        return 1

    write_accounts(accounts.values(), sys.stdout)
    return 0


if __name__ == "__main__":
    sys.exit(main())
