"""
Report export tests (CSV and PDF).
"""

import csv
import io

import pytest

from bitumen.models import Client
from bitumen.services.export_service import export_csv, export_pdf
from bitumen.services.resources import get_resource

from conftest import auth_headers_for, make_user


def seed_clients(session):
    session.add_all([
        Client(name="Alpha Infra", category="ALFA", billing_city="Pune", credit_limit=0),
        Client(name="Beta, Roads & Co", category="BETA", po_required=True),
        Client(name="Closed Account", category="GAMMA", is_active=False),
    ])
    session.commit()


class TestExportService:
    def test_csv_header_and_rows(self, db_session):
        seed_clients(db_session)
        spec = get_resource("clients")
        rows = db_session.query(Client).filter_by(is_active=True).order_by(Client.name).all()

        parsed = list(csv.reader(io.StringIO(export_csv(spec, rows))))
        assert parsed[0] == list(spec.export_columns)
        assert len(parsed) == 3

        first = dict(zip(parsed[0], parsed[1]))
        assert first["name"] == "Alpha Infra"
        assert first["credit_limit"] == "0.00"
        assert first["company_type"] == ""
        assert dict(zip(parsed[0], parsed[2]))["name"] == "Beta, Roads & Co"

    def test_pdf_bytes(self, db_session):
        seed_clients(db_session)
        spec = get_resource("clients")
        pdf = export_pdf(spec, db_session.query(Client).all(), title="Client list")
        assert pdf.startswith(b"%PDF")

    def test_empty_pdf(self, db_session):
        pdf = export_pdf(get_resource("orders"), [])
        assert pdf.startswith(b"%PDF")

    @pytest.mark.parametrize("title", ["R&D <Q1", "<b>unclosed", "Roads & Bridges"])
    def test_title_with_markup_characters(self, db_session, title):
        pdf = export_pdf(get_resource("clients"), [], title=title)
        assert pdf.startswith(b"%PDF")


class TestReportRoutes:
    def test_csv_download(self, client, admin_headers, db_session):
        seed_clients(db_session)
        resp = client.get("/api/reports/clients.csv", headers=admin_headers)
        assert resp.status_code == 200
        assert resp.mimetype == "text/csv"
        assert "attachment" in resp.headers["Content-Disposition"]

        parsed = list(csv.reader(io.StringIO(resp.get_data(as_text=True))))
        names = {row[1] for row in parsed[1:]}
        assert names == {"Alpha Infra", "Beta, Roads & Co"}

    def test_csv_respects_filters(self, client, admin_headers, db_session):
        seed_clients(db_session)
        resp = client.get("/api/reports/clients.csv?category=beta&include_inactive=true", headers=admin_headers)
        parsed = list(csv.reader(io.StringIO(resp.get_data(as_text=True))))
        assert [row[1] for row in parsed[1:]] == ["Beta, Roads & Co"]

    def test_pdf_download(self, client, admin_headers, db_session):
        seed_clients(db_session)
        resp = client.get("/api/reports/clients.pdf?title=Clients", headers=admin_headers)
        assert resp.status_code == 200
        assert resp.mimetype == "application/pdf"
        assert resp.data.startswith(b"%PDF")

    def test_pdf_title_is_plain_text(self, client, admin_headers, db_session):
        seed_clients(db_session)
        resp = client.get("/api/reports/clients.pdf?title=R%26D%20<Q1", headers=admin_headers)
        assert resp.status_code == 200
        assert resp.data.startswith(b"%PDF")

    def test_export_needs_view_grant(self, client, sales_headers):
        assert client.get("/api/reports/clients.csv", headers=sales_headers).status_code == 403
        assert client.get("/api/reports/payments.pdf", headers=sales_headers).status_code == 403

    def test_view_grant_is_enough(self, client, db_session):
        headers = auth_headers_for(make_user("viewer", grants=[("CREDIT_PAYMENTS", "VIEW")]))
        assert client.get("/api/reports/payments.csv", headers=headers).status_code == 200

    def test_unknown_report(self, client, admin_headers):
        assert client.get("/api/reports/invoices.csv", headers=admin_headers).status_code == 404

    def test_requires_auth(self, client, db_session):
        assert client.get("/api/reports/clients.csv").status_code == 401
