"""
Tests de API - Documentos y movimientos
"""
import pytest


@pytest.fixture
def datos(crear_producto, crear_almacen):
    return {
        "producto": crear_producto("TOR-100", "Tornillo M6"),
        "central": crear_almacen("WH1", "Central"),
        "norte": crear_almacen("WH2", "Norte"),
    }


def _recibir(client, datos, cantidad):
    r = client.post(
        "/documentos/recepciones",
        json={
            "proveedor": "Ferretería SL",
            "id_almacen": datos["central"].id,
            "lineas": [{"id_producto": datos["producto"].id, "cantidad": cantidad}],
        },
    )
    assert r.status_code == 201
    return r.json()


class TestDocumentosAPI:
    def test_recepcion_completa(self, auth_client, datos, usuario):
        doc = _recibir(auth_client, datos, 150)
        assert doc["numero"] == "REC-000001"
        assert doc["estado"] == "Draft"
        assert doc["lineas"][0]["cantidad"] == 150

        r = auth_client.post(f"/documentos/{doc['id']}/validar")
        assert r.status_code == 200
        movimientos = r.json()
        assert len(movimientos) == 1
        assert movimientos[0]["tipo_movimiento"] == "Receipt"
        assert movimientos[0]["id_usuario"] == usuario.id

        r = auth_client.get(f"/documentos/{doc['id']}")
        assert r.json()["estado"] == "Done"
        assert r.json()["validado_en"] is not None

        r = auth_client.get(f"/movimientos/documento/{doc['id']}")
        assert r.json()["total"] == 1

    def test_entrega_necesita_ready(self, auth_client, datos):
        recepcion = _recibir(auth_client, datos, 150)
        auth_client.post(f"/documentos/{recepcion['id']}/validar")

        r = auth_client.post(
            "/documentos/entregas",
            json={
                "cliente": "Cliente SA",
                "id_almacen": datos["central"].id,
                "lineas": [{"id_producto": datos["producto"].id, "cantidad": 50}],
            },
        )
        assert r.status_code == 201
        entrega = r.json()

        r = auth_client.post(f"/documentos/{entrega['id']}/validar")
        assert r.status_code == 409

        r = auth_client.put(f"/documentos/{entrega['id']}/estado", json={"estado": "Ready"})
        assert r.status_code == 200
        assert r.json()["estado"] == "Ready"

        r = auth_client.post(f"/documentos/{entrega['id']}/validar")
        assert r.status_code == 200

        r = auth_client.get(
            f"/stock/producto/{datos['producto'].id}/almacen/{datos['central'].id}"
        )
        assert r.json()["cantidad"] == 100

    def test_entrega_sin_stock(self, auth_client, datos):
        r = auth_client.post(
            "/documentos/entregas",
            json={
                "cliente": "Cliente SA",
                "id_almacen": datos["central"].id,
                "lineas": [{"id_producto": datos["producto"].id, "cantidad": 5}],
            },
        )
        assert r.status_code == 409
        assert "Disponible: 0, Requerido: 5" in r.json()["detail"]

    def test_transferencia_mismo_almacen(self, auth_client, datos):
        r = auth_client.post(
            "/documentos/transferencias",
            json={
                "id_almacen_origen": datos["central"].id,
                "id_almacen_destino": datos["central"].id,
                "lineas": [{"id_producto": datos["producto"].id, "cantidad": 1}],
            },
        )
        assert r.status_code == 400

    def test_documento_sin_lineas(self, auth_client, datos):
        r = auth_client.post(
            "/documentos/ajustes",
            json={
                "id_almacen": datos["central"].id,
                "lineas": [
                    {
                        "id_producto": datos["producto"].id,
                        "cantidad_registrada": 3,
                        "cantidad_fisica": 3,
                    }
                ],
            },
        )
        assert r.status_code == 400

    def test_estado_no_permitido(self, auth_client, datos):
        doc = _recibir(auth_client, datos, 1)
        r = auth_client.put(f"/documentos/{doc['id']}/estado", json={"estado": "Done"})
        assert r.status_code == 422

        auth_client.put(f"/documentos/{doc['id']}/estado", json={"estado": "Canceled"})
        r = auth_client.put(f"/documentos/{doc['id']}/estado", json={"estado": "Ready"})
        assert r.status_code == 409

    def test_documento_inexistente(self, auth_client):
        assert auth_client.get("/documentos/999").status_code == 404
        assert auth_client.post("/documentos/999/validar").status_code == 404

    def test_listado(self, auth_client, datos):
        _recibir(auth_client, datos, 1)
        _recibir(auth_client, datos, 2)

        r = auth_client.get("/documentos/", params={"tipo": "Receipt", "limit": 1})
        assert r.status_code == 200
        assert r.json()["total"] == 2
        assert len(r.json()["data"]) == 1

        r = auth_client.get("/documentos/", params={"search": "REC-000002"})
        assert [d["numero"] for d in r.json()["data"]] == ["REC-000002"]


class TestMovimientosAPI:
    def test_filtros(self, auth_client, datos):
        doc = _recibir(auth_client, datos, 10)
        auth_client.post(f"/documentos/{doc['id']}/validar")

        r = auth_client.get("/movimientos/", params={"id_producto": datos["producto"].id})
        assert r.status_code == 200
        assert r.json()["total"] == 1
        assert r.json()["data"][0]["stock_nuevo"] == 10

        r = auth_client.get("/movimientos/", params={"tipo_movimiento": "Delivery"})
        assert r.json()["total"] == 0

    def test_rango_de_fechas_invertido(self, auth_client):
        r = auth_client.get(
            "/movimientos/",
            params={"fecha_desde": "2025-02-01", "fecha_hasta": "2025-01-01"},
        )
        assert r.status_code == 400
