"""Tests for the spreadsheet import endpoints."""

import json

import pytest
from httpx import AsyncClient

from bizdir.config import get_settings

XLSX_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
HEADERS = ["Naam (zaak)", "Adres", "Postcode", "Plaats", "Categorie"]


def _upload(content: bytes, filename: str = "businesses.csv", content_type: str = "text/csv") -> dict:
    return {"file": (filename, content, content_type)}


@pytest.mark.asyncio
async def test_import_csv_all_rows_valid(client: AsyncClient, csv_file) -> None:
    content = csv_file(
        HEADERS,
        [
            ["Bakkerij Jansen", "Dorpsstraat 12", "1234 AB", "Utrecht", "bakery"],
            ["Slagerij De Vries", "Kerkstraat 4", "4321 CD", "Amersfoort", "butcher, retail"],
        ],
    )
    response = await client.post("/api/import", files=_upload(content))
    assert response.status_code == 201

    data = response.json()
    assert data["success"] is True
    assert data["imported"] == 2
    assert data["failed"] == 0
    assert data["errors"] == []
    assert data["businesses"][0]["name"] == "Bakkerij Jansen"
    assert data["businesses"][0]["streetName"] == "Dorpsstraat 12"
    assert data["businesses"][1]["tags"] == ["butcher", "retail"]

    listed = (await client.get("/api/businesses")).json()
    assert len(listed) == 2


@pytest.mark.asyncio
async def test_import_partial_failure_returns_207(client: AsyncClient, csv_file) -> None:
    content = csv_file(
        HEADERS,
        [
            ["Shop One", "Street 1", "1000 AA", "Delft", ""],
            ["", "Street 2", "2000 BB", "", ""],
            ["Shop Three", "Street 3", "3000 CC", "Gouda", ""],
        ],
    )
    response = await client.post("/api/import", files=_upload(content))
    assert response.status_code == 207

    data = response.json()
    assert data["success"] is False
    assert data["imported"] == 2
    assert data["failed"] == 1
    assert len(data["errors"]) == 1
    error = data["errors"][0]
    assert error["row"] == 3
    assert error["error"] == "Missing required fields: name, city"
    assert error["data"]["Adres"] == "Street 2"


@pytest.mark.asyncio
async def test_import_all_rows_invalid_returns_207(client: AsyncClient, csv_file) -> None:
    content = csv_file(HEADERS, [["", "", "", "", "tag"]])
    response = await client.post("/api/import", files=_upload(content))
    assert response.status_code == 207
    data = response.json()
    assert data["imported"] == 0
    assert data["failed"] == 1
    assert data["businesses"] == []


@pytest.mark.asyncio
async def test_import_batch_tags_merged_first(client: AsyncClient, csv_file) -> None:
    content = csv_file(
        ["Name", "Street Name", "Zipcode", "City", "Tags"],
        [["Shop", "Main 1", "1000 AA", "Delft", "B, C"]],
    )
    response = await client.post(
        "/api/import",
        files=_upload(content),
        data={"tags": json.dumps(["A", "B", " "])},
    )
    assert response.status_code == 201
    assert response.json()["businesses"][0]["tags"] == ["A", "B", "C"]


@pytest.mark.asyncio
async def test_import_xlsx(client: AsyncClient, xlsx_file) -> None:
    content = xlsx_file(
        ["NAME", "STREETNAME", "ZIPCODE", "CITY", "ACTIVE"],
        [["Shop", "Main 1", 1234, "Delft", "no"]],
    )
    response = await client.post(
        "/api/import",
        files=_upload(content, "businesses.xlsx", XLSX_TYPE),
    )
    assert response.status_code == 201
    business = response.json()["businesses"][0]
    assert business["zipcode"] == "1234"
    assert business["isActive"] is False


@pytest.mark.asyncio
async def test_import_without_file(client: AsyncClient) -> None:
    response = await client.post("/api/import", data={"tags": "[]"})
    assert response.status_code == 400
    assert response.json()["detail"] == "No file uploaded"


@pytest.mark.asyncio
@pytest.mark.parametrize("tags", ["not json", '{"a": 1}', "[1, 2]"])
async def test_import_malformed_tags(client: AsyncClient, csv_file, tags: str) -> None:
    content = csv_file(HEADERS, [["Shop", "Street", "1000", "Delft", ""]])
    response = await client.post("/api/import", files=_upload(content), data={"tags": tags})
    assert response.status_code == 400
    assert "tags" in response.json()["detail"]


@pytest.mark.asyncio
async def test_import_unsupported_extension(client: AsyncClient) -> None:
    response = await client.post(
        "/api/import",
        files=_upload(b"%PDF-1.4", "brochure.pdf", "application/pdf"),
    )
    assert response.status_code == 400
    assert "Unsupported file type" in response.json()["detail"]


@pytest.mark.asyncio
async def test_import_unparsable_file(client: AsyncClient) -> None:
    response = await client.post(
        "/api/import",
        files=_upload(b"\x00\x01\x02\x03binary", "data.csv"),
    )
    assert response.status_code == 400
    assert (await client.get("/api/businesses")).json() == []


@pytest.mark.asyncio
async def test_import_headers_only(client: AsyncClient, csv_file) -> None:
    response = await client.post("/api/import", files=_upload(csv_file(HEADERS, [])))
    assert response.status_code == 400
    assert response.json()["detail"] == "Spreadsheet has no data rows"


@pytest.mark.asyncio
async def test_import_oversized_file(client: AsyncClient, monkeypatch) -> None:
    monkeypatch.setattr(get_settings().config.storage, "max_upload_mb", 1)
    content = b"Name,City\n" + b"Shop,Delft\n" * 200_000
    response = await client.post("/api/import", files=_upload(content))
    assert response.status_code == 413


@pytest.mark.asyncio
async def test_preview_spreadsheet(client: AsyncClient, csv_file) -> None:
    content = csv_file(
        ["Naam", "Adres", "Postcode", "Notitie"],
        [[f"Shop {i}", f"Street {i}", "1000 AA", "x"] for i in range(8)],
    )
    response = await client.post("/api/import/preview", files=_upload(content, "leads.csv"))
    assert response.status_code == 200

    data = response.json()
    assert data["filename"] == "leads.csv"
    assert data["row_count"] == 8
    assert len(data["preview_rows"]) == 5
    assert data["suggested_mapping"] == {
        "Naam": "name",
        "Adres": "street_name",
        "Postcode": "zipcode",
        "Notitie": None,
    }
    assert data["missing_fields"] == ["city"]

    # Nothing is stored by a preview
    assert (await client.get("/api/businesses")).json() == []
