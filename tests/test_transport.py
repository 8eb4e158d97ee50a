"""Tests for the transport layer."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import httpx
import pytest

from extracolumn.transport import (
    APIError,
    AuthenticationError,
    GoogleSheetsTransport,
    InvalidRangeRequestError,
    LocalFileTransport,
    NotFoundError,
    TransportError,
    ValueRange,
)


def make_transport(handler: Callable[[httpx.Request], httpx.Response]) -> GoogleSheetsTransport:
    """Create a GoogleSheetsTransport whose HTTP client is served by ``handler``."""
    transport = GoogleSheetsTransport(access_token="ya29.test")
    transport._client = httpx.AsyncClient(
        transport=httpx.MockTransport(handler),
        headers={"Authorization": "Bearer ya29.test", "Accept": "application/json"},
    )
    return transport


class TestValueRange:
    def test_from_response(self) -> None:
        response = {
            "range": "Diagnostics!F1:F3",
            "majorDimension": "ROWS",
            "values": [["a"], [], ["c"]],
        }
        value_range = ValueRange.from_response(response, "Diagnostics!F:F")

        assert value_range.range == "Diagnostics!F1:F3"
        assert value_range.major_dimension == "ROWS"
        assert value_range.values == (("a",), (), ("c",))
        assert value_range.raw == response

    def test_missing_values(self) -> None:
        value_range = ValueRange.from_response({}, "Diagnostics!F:F")

        assert value_range.values == ()
        assert value_range.range == "Diagnostics!F:F"
        assert value_range.major_dimension == "ROWS"

    def test_null_row_is_empty(self) -> None:
        value_range = ValueRange.from_response({"values": [None]}, "Diagnostics!F:F")

        assert value_range.values == ((),)

    @pytest.mark.parametrize(
        "response",
        [["x"], "text", None, {"values": "abc"}, {"values": ["a", "b"]}],
    )
    def test_malformed_response(self, response: object) -> None:
        with pytest.raises(TransportError, match="Malformed API response"):
            ValueRange.from_response(response, "Diagnostics!F:F")

    def test_is_frozen(self) -> None:
        value_range = ValueRange.from_response({}, "Diagnostics!F:F")
        with pytest.raises(AttributeError):
            value_range.range = "changed"  # type: ignore[misc]


class TestLocalFileTransport:
    @pytest.mark.asyncio
    async def test_get_values(self, local_transport: LocalFileTransport) -> None:
        value_range = await local_transport.get_values("sparse_column", "Diagnostics!F:F")

        assert value_range.values == (("a",), (), ("c",))
        assert local_transport.requests == [("sparse_column", "Diagnostics!F:F")]

    @pytest.mark.asyncio
    async def test_not_found(self, local_transport: LocalFileTransport) -> None:
        with pytest.raises(NotFoundError, match="Golden file not found"):
            await local_transport.get_values("nonexistent", "Diagnostics!F:F")

    @pytest.mark.asyncio
    async def test_malformed_golden_file(self, tmp_path: Path) -> None:
        (tmp_path / "broken").mkdir()
        (tmp_path / "broken" / "values.json").write_text("{not json", encoding="utf-8")
        transport = LocalFileTransport(tmp_path)

        with pytest.raises(TransportError, match="Malformed golden file"):
            await transport.get_values("broken", "Diagnostics!F:F")

    @pytest.mark.asyncio
    async def test_close_is_noop(self, local_transport: LocalFileTransport) -> None:
        await local_transport.close()

    def test_golden_files_exist(self, golden_dir: Path) -> None:
        for name in ("diagnostics", "empty_column", "sparse_column"):
            assert (golden_dir / name / "values.json").exists()


class TestGoogleSheetsTransport:
    @pytest.mark.asyncio
    async def test_get_values_request(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(
                200,
                json={
                    "range": "'My Sheet'!F1:F2",
                    "majorDimension": "ROWS",
                    "values": [["x"], ["y"]],
                },
            )

        transport = make_transport(handler)
        value_range = await transport.get_values("sheet123", "'My Sheet'!F:F")
        await transport.close()

        assert value_range.values == (("x",), ("y",))
        request = seen[0]
        assert request.method == "GET"
        assert request.url.host == "sheets.googleapis.com"
        assert request.url.path == "/v4/spreadsheets/sheet123/values/'My Sheet'!F:F"
        assert request.url.params["majorDimension"] == "ROWS"
        assert request.headers["Authorization"] == "Bearer ya29.test"

    @pytest.mark.asyncio
    async def test_empty_range(self) -> None:
        transport = make_transport(
            lambda request: httpx.Response(
                200, json={"range": "Diagnostics!F1:F1000", "majorDimension": "ROWS"}
            )
        )
        value_range = await transport.get_values("sheet123", "Diagnostics!F:F")
        await transport.close()

        assert value_range.values == ()

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("status", "error_type", "message"),
        [
            (401, AuthenticationError, "expired"),
            (403, AuthenticationError, "Access denied"),
            (404, NotFoundError, "not found"),
        ],
    )
    async def test_status_mapping(
        self, status: int, error_type: type[Exception], message: str
    ) -> None:
        transport = make_transport(lambda request: httpx.Response(status))

        with pytest.raises(error_type, match=message):
            await transport.get_values("sheet123", "Diagnostics!F:F")
        await transport.close()

    @pytest.mark.asyncio
    async def test_bad_range(self) -> None:
        body = {
            "error": {
                "code": 400,
                "message": "Unable to parse range: Nope!F:F",
                "status": "INVALID_ARGUMENT",
            }
        }
        transport = make_transport(lambda request: httpx.Response(400, json=body))

        with pytest.raises(InvalidRangeRequestError, match="Unable to parse range") as exc_info:
            await transport.get_values("sheet123", "Nope!F:F")
        await transport.close()

        assert exc_info.value.status_code == 400
        assert isinstance(exc_info.value, APIError)

    @pytest.mark.asyncio
    async def test_server_error(self) -> None:
        transport = make_transport(lambda request: httpx.Response(503, text="unavailable"))

        with pytest.raises(APIError, match=r"API error \(503\): unavailable") as exc_info:
            await transport.get_values("sheet123", "Diagnostics!F:F")
        await transport.close()

        assert exc_info.value.status_code == 503

    @pytest.mark.asyncio
    async def test_network_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        transport = make_transport(handler)

        with pytest.raises(TransportError, match="Network error"):
            await transport.get_values("sheet123", "Diagnostics!F:F")
        await transport.close()

    @pytest.mark.asyncio
    async def test_malformed_body(self) -> None:
        transport = make_transport(lambda request: httpx.Response(200, text="<html>"))

        with pytest.raises(TransportError, match="Malformed API response"):
            await transport.get_values("sheet123", "Diagnostics!F:F")
        await transport.close()

    @pytest.mark.asyncio
    async def test_non_object_body(self) -> None:
        transport = make_transport(lambda request: httpx.Response(200, json=["x"]))

        with pytest.raises(TransportError, match="Malformed API response"):
            await transport.get_values("sheet123", "Diagnostics!F:F")
        await transport.close()

    @pytest.mark.asyncio
    async def test_null_row(self) -> None:
        transport = make_transport(
            lambda request: httpx.Response(200, json={"values": [["a"], None]})
        )

        value_range = await transport.get_values("sheet123", "Diagnostics!F:F")
        await transport.close()

        assert value_range.values == (("a",), ())
