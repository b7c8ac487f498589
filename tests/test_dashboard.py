"""
Tests de los KPIs del panel y de las notificaciones.
"""
from stockmaster.schemas.document import DeliveryCreate, ReceiptCreate, TransferCreate
from stockmaster.services import documents
from stockmaster.services.dashboard import calcular_kpis, generar_notificaciones


def test_kpis(session, usuario, crear_producto, crear_almacen, fijar_stock):
    sin_stock = crear_producto("SIN-1", "Sin stock", nivel_reorden=5)
    bajo = crear_producto("BAJ-1", "Bajo", nivel_reorden=10)
    ok = crear_producto("OK-1", "Correcto", nivel_reorden=10, categoria="Food")
    central = crear_almacen("WH1", "Central")
    norte = crear_almacen("WH2", "Norte")
    fijar_stock(bajo, central, 3)
    fijar_stock(ok, central, 50)

    recepcion = documents.crear_documento(
        session,
        ReceiptCreate(
            proveedor="Proveedor",
            id_almacen=central.id,
            lineas=[{"id_producto": sin_stock.id, "cantidad": 1}],
        ),
        usuario,
    )
    entrega = documents.crear_documento(
        session,
        DeliveryCreate(
            cliente="Cliente",
            id_almacen=central.id,
            lineas=[{"id_producto": ok.id, "cantidad": 1}],
        ),
        usuario,
    )
    documents.cambiar_estado(session, entrega, "Ready")
    documents.crear_documento(
        session,
        TransferCreate(
            id_almacen_origen=central.id,
            id_almacen_destino=norte.id,
            lineas=[{"id_producto": ok.id, "cantidad": 2}],
        ),
        usuario,
    )
    documents.validar_documento(session, recepcion, usuario)

    kpis = calcular_kpis(session)

    assert kpis == {
        "total_productos": 3,
        "stock_bajo": 2,  # "Bajo" (3/10) y "Sin stock" tras recibir 1 (1/5)
        "sin_stock": 0,
        "recepciones_pendientes": 0,
        "entregas_pendientes": 1,
        "transferencias_programadas": 1,
    }

    # El almacén Norte no tiene stock y solo es destino de la transferencia
    kpis_norte = calcular_kpis(session, id_almacen=norte.id)
    assert kpis_norte["sin_stock"] == 3
    assert kpis_norte["entregas_pendientes"] == 0
    assert kpis_norte["transferencias_programadas"] == 1

    kpis_food = calcular_kpis(session, categoria="Food", tipo_documento="Delivery")
    assert kpis_food["total_productos"] == 1
    assert kpis_food["entregas_pendientes"] == 1
    assert kpis_food["transferencias_programadas"] == 0


def test_notificaciones(session, usuario, crear_producto, crear_almacen, fijar_stock):
    agotado = crear_producto("AGO-1", "Agotado", nivel_reorden=5)
    bajo = crear_producto("BAJ-1", "Bajo", nivel_reorden=10)
    central = crear_almacen("WH1", "Central")
    fijar_stock(bajo, central, 2)
    recepcion = documents.crear_documento(
        session,
        ReceiptCreate(
            proveedor="Proveedor",
            id_almacen=central.id,
            lineas=[{"id_producto": agotado.id, "cantidad": 1}],
        ),
        usuario,
    )

    notificaciones = generar_notificaciones(session)

    por_tipo = {n["tipo"]: n for n in notificaciones}
    assert set(por_tipo) == {"out_of_stock", "low_stock", "pending_receipt"}
    assert por_tipo["out_of_stock"]["severidad"] == "error"
    assert por_tipo["low_stock"]["severidad"] == "warning"
    assert "Actual: 2, Reorden: 10" in por_tipo["low_stock"]["mensaje"]
    assert por_tipo["pending_receipt"]["id_documento"] == recepcion.id
    fechas = [n["fecha"] for n in notificaciones]
    assert fechas == sorted(fechas, reverse=True)


def test_endpoints(auth_client, crear_producto):
    crear_producto()

    r = auth_client.get("/dashboard/kpis")
    assert r.status_code == 200
    assert r.json()["sin_stock"] == 1

    r = auth_client.get("/dashboard/notificaciones")
    assert r.status_code == 200
    assert r.json()[0]["tipo"] == "out_of_stock"
