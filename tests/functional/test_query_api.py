"""
API tests for the visual query builder endpoints.
Tests execution, export, error mapping and request logging.
"""

import io

from fastapi.testclient import TestClient
from openpyxl import load_workbook

from dotacion.logging.models import Log


def col(name, table="dotacion_gcba_prueba"):
    return {"table": table, "column": name}


class TestExecuteQuery:
    """POST /api/query/execute"""

    def test_execute(self, client: TestClient, simple_query):
        response = client.post("/api/query/execute", json=simple_query)
        assert response.status_code == 200

        data = response.json()
        assert data["sql"] == (
            "SELECT `dotacion_gcba_prueba`.`AYN` FROM `dotacion_gcba_prueba` "
            "WHERE `dotacion_gcba_prueba`.`MINISTERIO` = 'Salud'"
        )
        assert data["rowCount"] == 2
        assert sorted(row["AYN"] for row in data["rows"]) == ["Gómez, María", "Pérez, Juan"]

    def test_dates_returned_as_days(self, client: TestClient):
        query = {
            "select": [col("AYN"), col("FEC_NACIM")],
            "from": {"name": "dotacion_gcba_prueba"},
            "where": [{"left": col("FEC_NACIM"), "operator": "<", "rightValue": "1980-01-01"}],
        }
        response = client.post("/api/query/execute", json=query)
        assert response.status_code == 200
        assert response.json()["rows"] == [{"AYN": "López, Carlos", "FEC_NACIM": "1970-01-05"}]

    def test_limit_and_order(self, client: TestClient):
        query = {
            "select": [col("AYN")],
            "from": {"name": "dotacion_gcba_prueba"},
            "orderBy": [{"column": col("AYN"), "direction": "DESC"}],
            "limit": 1,
        }
        response = client.post("/api/query/execute", json=query)
        assert response.status_code == 200
        assert response.json()["rows"] == [{"AYN": "Pérez, Juan"}]

    def test_in_and_between(self, client: TestClient):
        query = {
            "select": [col("AYN")],
            "from": {"name": "dotacion_gcba_prueba"},
            "where": [
                {"left": col("MINISTERIO"), "operator": "IN", "inValues": ["Salud", "Educación"]},
                {"left": col("ROL"), "operator": "BETWEEN", "betweenValues": [100, 150]},
            ],
        }
        response = client.post("/api/query/execute", json=query)
        assert response.status_code == 200
        assert response.json()["rowCount"] == 2

    def test_empty_select(self, client: TestClient, simple_query):
        simple_query["select"] = []
        response = client.post("/api/query/execute", json=simple_query)
        assert response.status_code == 400
        assert response.json()["detail"] == "Debe seleccionar al menos una columna"

    def test_missing_table(self, client: TestClient, simple_query):
        del simple_query["from"]
        response = client.post("/api/query/execute", json=simple_query)
        assert response.status_code == 400
        assert response.json()["detail"] == "Debe especificar una tabla"

    def test_table_not_allowed(self, client: TestClient, simple_query):
        simple_query["from"] = {"name": "usuarios"}
        response = client.post("/api/query/execute", json=simple_query)
        assert response.status_code == 400
        assert "usuarios" in response.json()["detail"]

    def test_joins_rejected(self, client: TestClient, simple_query):
        simple_query["joins"] = [{"table": "padron", "on": "x"}]
        response = client.post("/api/query/execute", json=simple_query)
        assert response.status_code == 400

    def test_unsupported_operator(self, client: TestClient, simple_query):
        simple_query["where"][0]["operator"] = "OR 1=1 --"
        response = client.post("/api/query/execute", json=simple_query)
        assert response.status_code == 400

    def test_list_operand_rejected(self, client: TestClient, simple_query):
        simple_query["where"][0]["rightValue"] = ["Salud", "x"]
        response = client.post("/api/query/execute", json=simple_query)
        assert response.status_code == 400
        assert response.json()["detail"].startswith("Valor inválido en la condición")

    def test_object_operand_rejected(self, client: TestClient, simple_query):
        simple_query["where"][0].update(operator="LIKE", rightValue={"a": 1})
        response = client.post("/api/query/execute", json=simple_query)
        assert response.status_code == 400

    def test_malformed_body(self, client: TestClient):
        response = client.post(
            "/api/query/execute", content="{not json", headers={"content-type": "application/json"}
        )
        assert response.status_code == 422

    def test_database_error_verbose(self, client: TestClient):
        # padron has no static column list, so the column passes validation
        query = {"select": [col("NO_EXISTE", table="padron")], "from": {"name": "padron"}}
        response = client.post("/api/query/execute", json=query)
        assert response.status_code == 500

        data = response.json()
        assert data["detail"] == "Error al ejecutar la consulta. Por favor, verifique los datos."
        assert "NO_EXISTE" in data["details"]

    def test_database_error_hides_details(self, client: TestClient):
        client.app.state.settings.verbose_errors = False
        query = {"select": [col("NO_EXISTE", table="padron")], "from": {"name": "padron"}}
        response = client.post("/api/query/execute", json=query)
        assert response.status_code == 500
        assert "details" not in response.json()


class TestExportQuery:
    """POST /api/query/export"""

    def test_export_csv(self, client: TestClient, simple_query):
        simple_query["orderBy"] = [{"column": col("AYN"), "direction": "ASC"}]
        response = client.post("/api/query/export?format=csv", json=simple_query)
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/csv")

        disposition = response.headers["content-disposition"]
        assert disposition.startswith('attachment; filename="consulta_')
        assert disposition.endswith('.csv"')
        assert response.content.decode("utf-8") == 'AYN\n"Gómez, María"\n"Pérez, Juan"'

    def test_export_defaults_to_csv(self, client: TestClient, simple_query):
        response = client.post("/api/query/export", json=simple_query)
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/csv")

    def test_export_xlsx(self, client: TestClient, simple_query):
        response = client.post("/api/query/export?format=xlsx", json=simple_query)
        assert response.status_code == 200
        assert response.headers["content-disposition"].endswith('.xlsx"')

        workbook = load_workbook(io.BytesIO(response.content))
        assert workbook.sheetnames == ["Consulta"]
        assert workbook["Consulta"].max_row == 3

    def test_export_unknown_format(self, client: TestClient, simple_query):
        response = client.post("/api/query/export?format=pdf", json=simple_query)
        assert response.status_code == 400

    def test_export_empty_result(self, client: TestClient, simple_query):
        simple_query["where"][0]["rightValue"] = "Inexistente"
        response = client.post("/api/query/export?format=csv", json=simple_query)
        assert response.status_code == 200
        assert response.content == b"AYN"


class TestRequestLogging:
    def test_request_logged(self, client: TestClient, simple_query):
        client.post("/api/query/execute", json=simple_query)

        with client.app.state.log_session_factory() as session:
            logs = session.query(Log).filter(Log.path == "/api/query/execute").all()

        assert len(logs) == 1
        assert logs[0].method == "POST"
        assert logs[0].status_code == 200
        assert "Salud" in logs[0].request_body
        assert logs[0].application_id == "dotacion"

    def test_logging_disabled(self, client: TestClient, simple_query):
        client.app.state.settings.log_requests = False
        client.post("/api/query/execute", json=simple_query)

        with client.app.state.log_session_factory() as session:
            assert session.query(Log).count() == 0
