"""
Integration tests for the library API.

Covers:
- App factory and startup against a real (SQLite file) database
- End-to-end list, read, filter, sort, paginate and include flows
- JSON:API error documents for rejected queries and missing rows
- Member and loan writes committed to the database
- Health, metrics, request timing and CORS

These tests use the full application and real HTTP requests through TestClient.
"""
import asyncio

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import event, text
from sqlalchemy.ext.asyncio import create_async_engine

import bibliocore.db.engine as db_engine
from bibliocore.config import TestingSettings
from bibliocore.factory import create_app

SCHEMA = [
    "CREATE TABLE mst_member_type (member_type_id INTEGER PRIMARY KEY, member_type_name TEXT, "
    "loan_limit INTEGER, loan_periode INTEGER)",
    "CREATE TABLE member (member_id TEXT PRIMARY KEY, member_name TEXT, member_email TEXT, "
    "member_type_id INTEGER, expire_date TEXT, is_pending INTEGER, register_date TEXT, "
    "gender INTEGER, member_since_date TEXT, last_update TEXT)",
    "CREATE TABLE item (item_id INTEGER PRIMARY KEY, item_code TEXT)",
    "CREATE TABLE loan (loan_id INTEGER PRIMARY KEY, item_code TEXT, member_id TEXT, "
    "loan_date TEXT, due_date TEXT, actual TEXT, return_date TEXT, is_return INTEGER, "
    "is_lent INTEGER)",
    "CREATE TABLE mst_gmd (gmd_id INTEGER PRIMARY KEY, gmd_code TEXT, gmd_name TEXT)",
]

ROWS = [
    "INSERT INTO mst_member_type VALUES (1, 'Student', 3, 7)",
    "INSERT INTO member VALUES ('M1', 'Ann', 'ann@example.org', 1, '2030-01-01', 0, "
    "'2024-01-01', NULL, NULL, NULL)",
    "INSERT INTO member VALUES ('M2', 'Bob', 'bob@example.org', 1, '2030-01-01', 1, "
    "'2024-02-01', NULL, NULL, NULL)",
    "INSERT INTO item VALUES (1, 'B1')",
    "INSERT INTO item VALUES (2, 'B2')",
    "INSERT INTO loan VALUES (1, 'B1', 'M1', '2024-01-01', '2024-01-08', NULL, NULL, 0, 1)",
    "INSERT INTO loan VALUES (2, 'B2', 'M1', '2024-02-01', '2024-02-08', NULL, NULL, 0, 1)",
    "INSERT INTO loan VALUES (3, 'B1', 'M2', '2024-03-01', '2024-03-08', '2024-03-05', "
    "'2024-03-05', 1, 0)",
    "INSERT INTO mst_gmd VALUES (1, 'TE', 'Text')",
    "INSERT INTO mst_gmd VALUES (2, 'AR', 'Artwork')",
]


async def seed(url):
    engine = create_async_engine(url)
    async with engine.begin() as conn:
        for statement in SCHEMA + ROWS:
            await conn.execute(text(statement))
    await engine.dispose()


@pytest.fixture
def settings(tmp_path):
    url = f"sqlite+aiosqlite:///{tmp_path / 'library.db'}"
    asyncio.run(seed(url))
    return TestingSettings(DATABASE_URL=url)


@pytest.fixture
def client(settings):
    app = create_app(settings)
    with TestClient(app, raise_server_exceptions=False) as c:
        yield c


@pytest.fixture
def statements(client):
    """Record every SQL statement the application sends to the database."""
    seen = []

    def record(conn, cursor, statement, parameters, context, executemany):
        seen.append(statement)

    target = db_engine.engine.sync_engine
    event.listen(target, "before_cursor_execute", record)
    yield seen
    event.remove(target, "before_cursor_execute", record)


def test_filter_sort_and_paginate_loans(client):
    resp = client.get(
        "/loans?filter[is_return]=0&sort=-loan_date&page[size]=1&page[number]=1"
    )
    assert resp.status_code == 200
    body = resp.json()
    assert body["meta"] == {"page": 1, "per_page": 1, "total": 2}
    [loan] = body["data"]
    assert loan["type"] == "loans"
    assert loan["id"] == "2"
    assert loan["attributes"]["loan_date"] == "2024-02-01"


def test_second_page(client):
    body = client.get(
        "/loans?filter[is_return]=false&sort=-loan_date&page[size]=1&page[number]=2"
    ).json()
    assert [loan["id"] for loan in body["data"]] == ["1"]


def test_default_sort_is_most_recent_first(client):
    body = client.get("/loans").json()
    assert [loan["id"] for loan in body["data"]] == ["3", "2", "1"]
    assert body["meta"] == {"page": 1, "per_page": 20, "total": 3}


def test_page_past_the_end(client):
    body = client.get("/loans?page=5").json()
    assert body["data"] == []
    assert body["meta"]["total"] == 3


@pytest.mark.parametrize(
    "query,per_page",
    [
        ("page[number]=99999999999999999999", 20),
        ("page=999999999999999999&per_page=100", 100),
    ],
)
def test_huge_page_number_is_an_empty_page(client, query, per_page):
    resp = client.get(f"/loans?{query}")
    assert resp.status_code == 200
    body = resp.json()
    assert body["data"] == []
    assert body["meta"] == {"page": 2**32 - 1, "per_page": per_page, "total": 3}


def test_include_resolves_each_key_once(client, statements):
    body = client.get("/loans?include=member&sort=loan_id").json()
    members = [loan["attributes"]["member"]["member_name"] for loan in body["data"]]
    assert members == ["Ann", "Ann", "Bob"]
    member_lookups = [s for s in statements if "FROM member WHERE" in s]
    assert len(member_lookups) == 2


def test_include_caches_are_not_shared_between_requests(client, statements):
    client.get("/loans?include=member")
    client.get("/loans?include=member")
    assert len([s for s in statements if "FROM member WHERE" in s]) == 4


def test_read_member_with_lookup_and_fieldset(client):
    resp = client.get("/members/M1?include=member_type&fields[members]=member_name,member_type")
    assert resp.status_code == 200
    assert resp.json()["data"] == {
        "type": "members",
        "id": "M1",
        "attributes": {
            "member_name": "Ann",
            "member_type": {
                "member_type_id": 1,
                "member_type_name": "Student",
                "loan_limit": 3,
                "loan_periode": 7,
            },
        },
    }


def test_member_filters(client):
    body = client.get("/members?filter[member_name]=bo").json()
    assert [m["id"] for m in body["data"]] == ["M2"]
    body = client.get("/members?filter[is_pending]=1").json()
    assert [m["id"] for m in body["data"]] == ["M2"]


def test_unsupported_filter_document(client):
    resp = client.get("/loans?filter[password]=x")
    assert resp.status_code == 400
    assert resp.json() == {
        "errors": [
            {
                "status": "400",
                "code": "UNSUPPORTED_FILTER",
                "title": "Bad Request",
                "detail": "filter `password` is not supported",
                "source": {"parameter": "filter[password]"},
            }
        ]
    }


def test_unsupported_sort_document(client):
    resp = client.get("/loans?sort=-password")
    assert resp.status_code == 400
    [error] = resp.json()["errors"]
    assert error["detail"] == "sorting by `password` is not supported"
    assert error["source"] == {"parameter": "sort"}


def test_not_found_document(client):
    resp = client.get("/members/NOPE")
    assert resp.status_code == 404
    [error] = resp.json()["errors"]
    assert error["status"] == "404"
    assert error["title"] == "Not Found"


def test_missing_table_is_a_generic_500(client):
    resp = client.get("/visitors")
    assert resp.status_code == 500
    [error] = resp.json()["errors"]
    assert error["detail"] == "database error"
    assert "visitor_count" not in resp.text


def test_member_create_update_delete(client):
    body = {"member_id": "M3", "member_name": "Cy", "member_type_id": 1, "expire_date": "2031-06-30"}
    resp = client.post("/members", json=body)
    assert resp.status_code == 201
    assert resp.json()["data"]["attributes"] == {
        "member_id": "M3",
        "member_name": "Cy",
        "member_email": None,
        "member_type_id": 1,
        "expire_date": "2031-06-30",
        "is_pending": 0,
    }

    assert client.post("/members", json=body).status_code == 409

    resp = client.put("/members/M3", json={**body, "member_name": "Cyd"})
    assert resp.status_code == 200
    assert client.get("/members/M3").json()["data"]["attributes"]["member_name"] == "Cyd"

    assert client.delete("/members/M3").status_code == 204
    assert client.get("/members/M3").status_code == 404
    assert client.delete("/members/M3").status_code == 404


def test_loan_create_and_return(client):
    body = {"item_code": "B2", "member_id": "M2", "due_date": "2024-06-01"}
    resp = client.post("/loans", json=body)
    assert resp.status_code == 201
    loan = resp.json()["data"]
    assert loan["id"] == "4"
    assert loan["attributes"]["due_date"] == "2024-06-01"
    assert loan["attributes"]["is_return"] == 0
    assert loan["attributes"]["loan_date"] is not None

    resp = client.post("/loans/4/return")
    assert resp.status_code == 200
    attributes = resp.json()["data"]["attributes"]
    assert attributes["is_return"] == 1
    assert attributes["return_date"] is not None
    assert attributes["actual"] == attributes["return_date"]

    body = client.get("/loans?filter[is_return]=0").json()
    assert body["meta"]["total"] == 2


def test_lookup_table(client):
    resp = client.get("/lookups/gmd?per_page=1&page=2")
    assert resp.json() == {
        "data": [{"gmd_id": 2, "gmd_code": "AR", "gmd_name": "Artwork"}],
        "page": 2,
        "per_page": 1,
        "total": 2,
    }


def test_health_endpoint(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["type"] == "health"
    assert data["attributes"]["status"] == "ok"
    assert data["attributes"]["checks"][0]["connected"] is True


def test_metrics_endpoint(client):
    client.get("/loans")
    resp = client.get("/metrics")
    assert resp.status_code == 200
    assert "http_requests_total" in resp.text
    assert 'endpoint="/loans"' in resp.text
    assert "bibliocore_app_info" in resp.text


def test_timing_header(client):
    resp = client.get("/loans")
    assert resp.headers["X-Process-Time"].endswith("ms")


def test_cors_preflight(client):
    resp = client.options(
        "/loans",
        headers={"Origin": "http://opac.example", "Access-Control-Request-Method": "GET"},
    )
    assert resp.status_code == 200
    assert resp.headers["access-control-allow-origin"] == "*"


def test_engine_disposed_after_shutdown(settings):
    with TestClient(create_app(settings)):
        assert db_engine.engine is not None
    assert db_engine.engine is None
