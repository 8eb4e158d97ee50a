"""ColumnExporter - export one spreadsheet column to a text file.

Reads a full-column range, keeps the first cell of every row and writes the
values newline-joined to a local file.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from loguru import logger

from extracolumn.credentials import CredentialProvider, CredentialsError
from extracolumn.ranges import validate_column_range
from extracolumn.transport import Transport, TransportError
from extracolumn.writer import TextFileWriter

__all__ = [
    "ColumnExporter",
    "ExportError",
    "ExportRequest",
    "ExportResult",
    "TransportFactory",
    "first_cell",
    "join_rows",
]


# Builds the Transport for an access token
TransportFactory = Callable[[str], Transport]


class ExportError(Exception):
    """Raised when an export fails at any step.

    The underlying exception is chained and kept in ``cause``.
    """

    def __init__(self, message: str, cause: BaseException | None = None) -> None:
        super().__init__(message)
        self.cause = cause


@dataclass(frozen=True)
class ExportRequest:
    """What to export and where to put it."""

    source_id: str
    range_reference: str
    output_path: Path

    def __post_init__(self) -> None:
        validate_column_range(self.range_reference)
        if not self.source_id:
            raise ValueError("source_id must not be empty")
        # Accept plain strings for convenience
        object.__setattr__(self, "output_path", Path(self.output_path))


@dataclass(frozen=True)
class ExportResult:
    """Result of a successful export."""

    row_count: int
    output_path: Path


def first_cell(row: Sequence[Any]) -> str:
    """Return the first cell of a row as text, or "" if the row has none."""
    if not row:
        return ""
    value = row[0]
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def join_rows(rows: Iterable[Sequence[Any]]) -> str:
    """Join the first cell of each row with newlines, keeping empty rows."""
    return "\n".join(first_cell(row) for row in rows)


class ColumnExporter:
    """Exports a single column of a spreadsheet to a text file.

    Example:
        >>> from extracolumn.credentials import ApplicationDefaultCredentials
        >>> from extracolumn.transport import GoogleSheetsTransport
        >>> exporter = ColumnExporter(
        ...     ApplicationDefaultCredentials(),
        ...     lambda token: GoogleSheetsTransport(access_token=token),
        ... )
        >>> result = await exporter.export(
        ...     ExportRequest("1FQzuRQw...", "Diagnostics!F:F", Path("diagnostics.txt"))
        ... )
        >>> print(f"{result.row_count} lines written")
    """

    def __init__(
        self,
        credentials: CredentialProvider,
        transport_factory: TransportFactory,
        writer: TextFileWriter | None = None,
    ) -> None:
        """Initialize the exporter.

        Args:
            credentials: Provider of a valid access token
            transport_factory: Called with the access token, returns the
                Transport used for the read. The exporter closes it.
            writer: File writer, defaults to a UTF-8 TextFileWriter
        """
        self._credentials = credentials
        self._transport_factory = transport_factory
        self._writer = writer or TextFileWriter()

    async def export(self, request: ExportRequest) -> ExportResult:
        """Read the column and overwrite the output file with it.

        Raises:
            ExportError: If authentication, the read, or the write fails.
                The output file is left untouched unless the write succeeded.
        """
        logger.debug(
            "Exporting {} from {} to {}",
            request.range_reference,
            request.source_id,
            request.output_path,
        )

        try:
            token = self._credentials.get_token()
        except CredentialsError as e:
            raise ExportError(f"Authentication failed: {e}", cause=e) from e

        transport: Transport = self._transport_factory(token.access_token)
        try:
            value_range = await transport.get_values(
                request.source_id, request.range_reference
            )
        except TransportError as e:
            raise ExportError(str(e), cause=e) from e
        finally:
            await transport.close()

        rows = value_range.values
        content = join_rows(rows)

        try:
            written = self._writer.write(request.output_path, content)
        except (OSError, ValueError) as e:
            # ValueError covers text the encoding cannot represent
            reason = getattr(e, "strerror", None) or e
            raise ExportError(
                f"Cannot write {request.output_path}: {reason}", cause=e
            ) from e

        logger.info("Exported {} rows to {}", len(rows), written)
        return ExportResult(row_count=len(rows), output_path=written)
