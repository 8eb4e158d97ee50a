"""extracolumn - Export one Google Sheets column to a local text file.

Reads a full-column range through the Sheets API and writes the values,
one per line, to a UTF-8 file that is replaced on every run.
"""

__version__ = "0.1.0"

from extracolumn.credentials import (
    ApplicationDefaultCredentials,
    CredentialProvider,
    CredentialsError,
    KeyringCredentials,
    ServiceAccountCredentials,
    StaticTokenCredentials,
    Token,
)
from extracolumn.exporter import (
    ColumnExporter,
    ExportError,
    ExportRequest,
    ExportResult,
)
from extracolumn.transport import (
    APIError,
    AuthenticationError,
    GoogleSheetsTransport,
    LocalFileTransport,
    NotFoundError,
    Transport,
    TransportError,
    ValueRange,
)
from extracolumn.writer import TextFileWriter

__all__ = [
    "APIError",
    "ApplicationDefaultCredentials",
    "AuthenticationError",
    "ColumnExporter",
    "CredentialProvider",
    "CredentialsError",
    "ExportError",
    "ExportRequest",
    "ExportResult",
    "GoogleSheetsTransport",
    "KeyringCredentials",
    "LocalFileTransport",
    "NotFoundError",
    "ServiceAccountCredentials",
    "StaticTokenCredentials",
    "TextFileWriter",
    "Token",
    "Transport",
    "TransportError",
    "ValueRange",
    "__version__",
]
