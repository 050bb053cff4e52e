"""
Dump Codec Module

Reads and writes wallet state in a line-oriented text format. Fields within a
record are separated by ";":

    accounts   id;phone;balance
    payments   id;account_id;amount;category;status
    favorites  id;account_id;name;amount;category

Directory dumps hold one record per line with no trailing newline. The
single-file account dump joins records with "|" instead.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Optional, Sequence, TypeVar, Union

from .config import get_config
from .errors import DumpFormatError, InvalidRecordsCountError
from .models import Account, Favorite, Payment, PaymentStatus


logger = logging.getLogger("wallet.dump")

FIELD_SEPARATOR = ";"
LINE_SEPARATOR = "\n"
RECORD_SEPARATOR = "|"

# Characters a text field may not contain in a one-record-per-line dump
LINE_RESERVED = (FIELD_SEPARATOR, LINE_SEPARATOR)

PathLike = Union[str, Path]
T = TypeVar("T")


@dataclass
class DumpContents:
    """Records read from a dump directory; missing files give empty lists"""
    accounts: List[Account] = field(default_factory=list)
    payments: List[Payment] = field(default_factory=list)
    favorites: List[Favorite] = field(default_factory=list)


def _split(record: str, expected: int, kind: str) -> List[str]:
    fields = record.split(FIELD_SEPARATOR)
    if len(fields) != expected:
        raise DumpFormatError(
            f"Malformed {kind} record {record!r}: expected {expected} fields, got {len(fields)}"
        )
    return fields


def _to_int(value: str, name: str, record: str) -> int:
    try:
        return int(value)
    except ValueError:
        raise DumpFormatError(f"Invalid {name} {value!r} in record {record!r}") from None


def _check_text(value: str, name: str, kind: str, reserved: Sequence[str]) -> str:
    """Reject text fields that would split the record when read back"""
    for separator in reserved:
        if separator in value:
            raise DumpFormatError(
                f"Cannot dump {kind}: {name} {value!r} contains separator {separator!r}"
            )
    return value


def encode_account(account: Account, reserved: Sequence[str] = LINE_RESERVED) -> str:
    return FIELD_SEPARATOR.join([
        str(account.id),
        _check_text(account.phone, "phone", "account", reserved),
        str(account.balance)
    ])


def decode_account(record: str) -> Account:
    account_id, phone, balance = _split(record, 3, "account")
    return Account(
        id=_to_int(account_id, "account id", record),
        phone=phone,
        balance=_to_int(balance, "balance", record)
    )


def encode_payment(payment: Payment) -> str:
    return FIELD_SEPARATOR.join([
        _check_text(payment.id, "id", "payment", LINE_RESERVED),
        str(payment.account_id),
        str(payment.amount),
        _check_text(payment.category, "category", "payment", LINE_RESERVED),
        payment.status.value
    ])


def decode_payment(record: str) -> Payment:
    payment_id, account_id, amount, category, status = _split(record, 5, "payment")
    try:
        payment_status = PaymentStatus(status)
    except ValueError:
        raise DumpFormatError(f"Unknown payment status {status!r} in record {record!r}") from None

    return Payment(
        id=payment_id,
        account_id=_to_int(account_id, "account id", record),
        amount=_to_int(amount, "amount", record),
        category=category,
        status=payment_status
    )


def encode_favorite(favorite: Favorite) -> str:
    return FIELD_SEPARATOR.join([
        _check_text(favorite.id, "id", "favorite", LINE_RESERVED),
        str(favorite.account_id),
        _check_text(favorite.name, "name", "favorite", LINE_RESERVED),
        str(favorite.amount),
        _check_text(favorite.category, "category", "favorite", LINE_RESERVED)
    ])


def decode_favorite(record: str) -> Favorite:
    favorite_id, account_id, name, amount, category = _split(record, 5, "favorite")
    return Favorite(
        id=favorite_id,
        account_id=_to_int(account_id, "account id", record),
        name=name,
        amount=_to_int(amount, "amount", record),
        category=category
    )


def _write(path: Path, data: str) -> None:
    # newline="" keeps "\n" separators byte-identical on every platform
    with open(path, "w", encoding="utf-8", newline="") as f:
        f.write(data)


def _read(path: Path) -> str:
    with open(path, "r", encoding="utf-8", newline="") as f:
        return f.read()


def _read_lines(path: Path, decode: Callable[[str], T]) -> Optional[List[T]]:
    """Decode one record per line; None when the file does not exist"""
    try:
        data = _read(path)
    except FileNotFoundError:
        logger.debug(f"Dump file {path} not found, skipping")
        return None

    return [decode(line) for line in data.split(LINE_SEPARATOR) if line]


def export_accounts_to_file(accounts: Sequence[Account], path: PathLike) -> None:
    """
    Write all accounts to a single file as "|"-separated records

    Raises:
        DumpFormatError: a phone contains a separator; nothing is written
    """
    path = Path(path)
    reserved = LINE_RESERVED + (RECORD_SEPARATOR,)
    data = RECORD_SEPARATOR.join(encode_account(a, reserved) for a in accounts)
    _write(path, data)
    logger.info(f"Exported {len(accounts)} accounts to {path}")


def import_accounts_from_file(path: PathLike) -> List[Account]:
    """
    Read accounts written by export_accounts_to_file

    Raises:
        FileNotFoundError: path does not exist
        DumpFormatError: a record cannot be parsed
    """
    path = Path(path)
    data = _read(path)
    if not data:
        return []

    accounts = [decode_account(record) for record in data.split(RECORD_SEPARATOR)]
    logger.info(f"Imported {len(accounts)} accounts from {path}")
    return accounts


def export_to_directory(
    directory: PathLike,
    accounts: Sequence[Account],
    payments: Sequence[Payment],
    favorites: Sequence[Favorite]
) -> List[Path]:
    """
    Write accounts.dump, payments.dump and favorites.dump

    A file is only written for a non-empty collection. The directory must
    already exist. Every record is encoded before any file is written.

    Returns:
        Paths of the files written

    Raises:
        DumpFormatError: a text field contains a separator
    """
    cfg = get_config()
    directory = Path(directory).resolve()

    collections = [
        (cfg.accounts_dump_name, accounts, encode_account),
        (cfg.payments_dump_name, payments, encode_payment),
        (cfg.favorites_dump_name, favorites, encode_favorite),
    ]

    encoded = [
        (directory / name, LINE_SEPARATOR.join(encode(record) for record in records))
        for name, records, encode in collections
        if records
    ]

    written = []
    for path, data in encoded:
        _write(path, data)
        written.append(path)

    logger.info(
        f"Exported {len(accounts)} accounts, {len(payments)} payments and "
        f"{len(favorites)} favorites to {directory}"
    )
    return written


def import_from_directory(directory: PathLike) -> DumpContents:
    """
    Read the dump files of a directory

    Missing files are treated as holding no records; any other I/O error
    propagates.
    """
    cfg = get_config()
    directory = Path(directory).resolve()

    accounts = _read_lines(directory / cfg.accounts_dump_name, decode_account)
    payments = _read_lines(directory / cfg.payments_dump_name, decode_payment)
    favorites = _read_lines(directory / cfg.favorites_dump_name, decode_favorite)

    contents = DumpContents(
        accounts=accounts or [],
        payments=payments or [],
        favorites=favorites or []
    )
    logger.info(
        f"Imported {len(contents.accounts)} accounts, {len(contents.payments)} payments and "
        f"{len(contents.favorites)} favorites from {directory}"
    )
    return contents


def write_history_files(payments: Sequence[Payment], directory: PathLike, records: int) -> List[Path]:
    """
    Write payments into files of at most `records` payments each

    A single file is named payments.dump; several files are numbered
    payments1.dump, payments2.dump, ... and the last one holds the remainder.

    Args:
        payments: Payments to write, in order
        directory: Existing target directory
        records: Payments per file; clamped to len(payments)

    Returns:
        Paths of the files written (empty when there are no payments)

    Raises:
        InvalidRecordsCountError: records is less than 1
    """
    if not payments:
        return []

    if records < 1:
        raise InvalidRecordsCountError()

    cfg = get_config()
    directory = Path(directory).resolve()
    records = min(records, len(payments))

    chunks = [payments[i:i + records] for i in range(0, len(payments), records)]

    written = []
    for number, chunk in enumerate(chunks, start=1):
        if len(chunks) == 1:
            name = cfg.payments_dump_name
        else:
            name = f"{cfg.history_file_prefix}{number}{cfg.dump_extension}"
        path = directory / name
        _write(path, LINE_SEPARATOR.join(encode_payment(p) for p in chunk))
        written.append(path)

    logger.info(f"Wrote {len(payments)} payments into {len(written)} history files in {directory}")
    return written
