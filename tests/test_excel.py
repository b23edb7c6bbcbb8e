"""Tests for Excel import/export."""
import io

import pytest
from openpyxl import Workbook, load_workbook

from app.crm import create_app
from app.crm.modules.excel import service as excel_service
from app.crm.storage import MemStorage


@pytest.fixture()
def client(monkeypatch):
    monkeypatch.setenv("SECRET_KEY", "test-secret")
    monkeypatch.setenv("JWT_SECRET", "test-jwt-secret")
    monkeypatch.setenv("ENV", "test")
    for k in ("ADMIN_USERNAME", "ADMIN_PASSWORD", "ADMIN_FULL_NAME", "JWT_EXPIRES_HOURS"):
        monkeypatch.delenv(k, raising=False)

    app = create_app()
    return app.test_client()


@pytest.fixture()
def auth(client):
    r = client.post("/api/auth/login", json={"username": "admin", "password": "admin123"})
    return {"Authorization": f"Bearer {r.json['token']}"}


def _xlsx(rows):
    wb = Workbook()
    ws = wb.active
    for row in rows:
        ws.append(row)
    out = io.BytesIO()
    wb.save(out)
    out.seek(0)
    return out


def _read(data: bytes):
    ws = load_workbook(io.BytesIO(data)).active
    return [list(r) for r in ws.iter_rows(values_only=True)]


def test_export_requires_auth(client):
    assert client.get("/api/customers/export").status_code == 401


def test_customer_export_selected_fields(client, auth):
    client.post("/api/customers", json={"companyName": "Acme", "contactName": "Jane"}, headers=auth)
    client.post(
        "/api/customers",
        json={"companyName": "Beta", "contactName": "Bob", "status": "inactive"},
        headers=auth,
    )

    r = client.get("/api/customers/export?fields=companyName,status", headers=auth)
    assert r.status_code == 200
    assert r.mimetype == "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
    assert "musteriler_" in r.headers["Content-Disposition"]

    rows = _read(r.data)
    assert rows == [["Firma Adı", "Durum"], ["Acme", "Aktif"], ["Beta", "Pasif"]]


def test_export_unknown_field(client, auth):
    r = client.get("/api/customers/export?fields=companyName,secret", headers=auth)
    assert r.status_code == 400


def test_task_export_resolves_names(client, auth):
    c = client.post("/api/customers", json={"companyName": "Acme", "contactName": "Jane"}, headers=auth).json
    client.post(
        "/api/tasks",
        json={"title": "Quote", "status": "completed", "customerId": c["id"], "assignedTo": 1, "dueDate": "2026-05-01"},
        headers=auth,
    )
    client.post("/api/tasks", json={"title": "Orphan", "assignedTo": 42}, headers=auth)

    r = client.get("/api/tasks/export?fields=title,status,dueDate,customerId,assignedTo", headers=auth)
    assert r.status_code == 200
    rows = _read(r.data)
    assert rows[0] == ["Görev Adı", "Durum", "Tamamlanma Tarihi", "Müşteri", "Atanan Kişi"]
    assert rows[1] == ["Quote", "Tamamlandı", "01.05.2026", "Acme", "Admin User"]
    assert rows[2] == ["Orphan", "Bekliyor", None, None, "-"]


def test_import_excel_with_labels_and_ids(client, auth):
    data = _xlsx(
        [
            ["Firma Adı", "İletişim Kişisi", "Telefon", "status"],
            ["Acme", "Jane", 5550100, "Aktif"],
            ["Beta", "Bob", None, "Pasif"],
            [None, None, None, None],
            ["NoContact", None, None, None],
        ]
    )
    r = client.post(
        "/api/customers/import/excel",
        data={"file": (data, "customers.xlsx")},
        content_type="multipart/form-data",
        headers=auth,
    )
    assert r.status_code == 200
    assert r.json["imported"] == 2
    assert [e["row"] for e in r.json["errors"]] == [5]

    customers = client.get("/api/customers", headers=auth).json
    assert [(c["companyName"], c["status"], c["phone"]) for c in customers] == [
        ("Acme", "active", "5550100"),
        ("Beta", "inactive", None),
    ]
    assert all(c["createdBy"] == 1 for c in customers)


def test_import_excel_missing_required_columns(client, auth):
    data = _xlsx([["Telefon"], ["123"]])
    r = client.post(
        "/api/customers/import/excel",
        data={"file": (data, "customers.xlsx")},
        content_type="multipart/form-data",
        headers=auth,
    )
    assert r.status_code == 400
    assert "Firma Adı" in r.json["message"]


def test_import_excel_rejects_non_xlsx(client, auth):
    r = client.post(
        "/api/customers/import/excel",
        data={"file": (io.BytesIO(b"a,b"), "customers.csv")},
        content_type="multipart/form-data",
        headers=auth,
    )
    assert r.status_code == 400

    r = client.post(
        "/api/customers/import/excel",
        data={"file": (io.BytesIO(b"not a zip"), "customers.xlsx")},
        content_type="multipart/form-data",
        headers=auth,
    )
    assert r.status_code == 400


def test_exported_sheet_imports_back(client, auth):
    client.post(
        "/api/customers",
        json={"companyName": "Acme", "contactName": "Jane", "sector": "Retail"},
        headers=auth,
    )
    exported = client.get("/api/customers/export", headers=auth).data

    r = client.post(
        "/api/customers/import/excel",
        data={"file": (io.BytesIO(exported), "musteriler.xlsx")},
        content_type="multipart/form-data",
        headers=auth,
    )
    assert r.json == {"imported": 1, "errors": []}
    copy = client.get("/api/customers/2", headers=auth).json
    assert (copy["companyName"], copy["contactName"], copy["sector"], copy["status"]) == (
        "Acme",
        "Jane",
        "Retail",
        "active",
    )


def test_json_row_import_defaults_status(client, auth):
    r = client.post("/api/customers/import", json={"companyName": "Acme", "contactName": "Jane"}, headers=auth)
    assert r.status_code == 201
    assert r.json["status"] == "active"

    r = client.post("/api/customers/import", json={"companyName": "Acme"}, headers=auth)
    assert r.status_code == 400


def test_formula_like_text_exports_as_text_and_imports_back(client, auth):
    client.post("/api/customers", json={"companyName": "=Acme", "contactName": "+Jane"}, headers=auth)
    exported = client.get("/api/customers/export?fields=companyName,contactName", headers=auth).data

    ws = load_workbook(io.BytesIO(exported)).active
    assert ws["A2"].data_type == "s"
    assert ws["A2"].value == "=Acme"

    r = client.post(
        "/api/customers/import/excel",
        data={"file": (io.BytesIO(exported), "musteriler.xlsx")},
        content_type="multipart/form-data",
        headers=auth,
    )
    assert r.json == {"imported": 1, "errors": []}
    assert client.get("/api/customers/2", headers=auth).json["companyName"] == "=Acme"


def test_import_closes_workbook_when_columns_are_missing(monkeypatch):
    closed = []

    def tracking_load_workbook(*args, **kwargs):
        wb = load_workbook(*args, **kwargs)
        real_close = wb.close

        def close():
            closed.append(wb)
            real_close()

        wb.close = close
        return wb

    monkeypatch.setattr(excel_service, "load_workbook", tracking_load_workbook)

    with pytest.raises(excel_service.ExcelError):
        excel_service.import_customers(MemStorage(), _xlsx([["Telefon"], ["123"]]).getvalue(), user_id=None)
    assert len(closed) == 1
