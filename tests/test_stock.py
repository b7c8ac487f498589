"""
Tests del saldo de stock por (producto, almacén).
"""
import pytest

from stockmaster.exceptions import StockInsuficiente
from stockmaster.services.stock import (
    aplicar_delta,
    get_stock,
    nivel_stock,
    stock_por_producto,
    stock_total,
)


class TestSaldo:
    def test_sin_fila_es_cero(self, session, crear_producto, crear_almacen):
        producto = crear_producto()
        almacen = crear_almacen()
        assert get_stock(session, producto.id, almacen.id) == 0

    def test_primer_delta_positivo_crea_la_fila(self, session, crear_producto, crear_almacen):
        producto = crear_producto()
        almacen = crear_almacen()

        assert aplicar_delta(session, producto.id, almacen.id, 25) == 25
        assert aplicar_delta(session, producto.id, almacen.id, -5) == 20
        session.commit()

        assert get_stock(session, producto.id, almacen.id) == 20

    def test_delta_negativo_sin_stock_no_modifica(
        self, session, crear_producto, crear_almacen, fijar_stock
    ):
        """Con 3 unidades, restar 5 falla y el saldo sigue en 3"""
        producto = crear_producto()
        almacen = crear_almacen()
        fijar_stock(producto, almacen, 3)

        with pytest.raises(StockInsuficiente) as exc:
            aplicar_delta(session, producto.id, almacen.id, -5)

        assert exc.value.disponible == 3
        assert exc.value.requerido == 5
        assert "Disponible: 3, Requerido: 5" in exc.value.mensaje
        assert get_stock(session, producto.id, almacen.id) == 3

    def test_se_puede_dejar_a_cero(self, session, crear_producto, crear_almacen, fijar_stock):
        producto = crear_producto()
        almacen = crear_almacen()
        fijar_stock(producto, almacen, 7)

        assert aplicar_delta(session, producto.id, almacen.id, -7) == 0


class TestTotales:
    def test_total_suma_todos_los_almacenes(
        self, session, crear_producto, crear_almacen, fijar_stock
    ):
        producto = crear_producto()
        central = crear_almacen("WH1", "Central")
        norte = crear_almacen("WH2", "Norte")
        fijar_stock(producto, central, 40)
        fijar_stock(producto, norte, 15)

        assert stock_total(session, producto.id) == 55
        assert stock_total(session, producto.id, norte.id) == 15

    def test_total_sin_stock_es_cero(self, session, crear_producto):
        producto = crear_producto()
        assert stock_total(session, producto.id) == 0

    def test_desglose_por_almacen(self, session, crear_producto, crear_almacen, fijar_stock):
        producto = crear_producto()
        central = crear_almacen("WH1", "Central")
        norte = crear_almacen("WH2", "Norte")
        fijar_stock(producto, central, 40)
        fijar_stock(producto, norte, 15)

        desglose = stock_por_producto(session, producto.id)

        assert desglose == [
            {"id_almacen": central.id, "nombre_almacen": "Central", "cantidad": 40},
            {"id_almacen": norte.id, "nombre_almacen": "Norte", "cantidad": 15},
        ]


@pytest.mark.parametrize(
    "total,reorden,esperado",
    [
        (0, 10, "sin_stock"),
        (1, 10, "bajo"),
        (9, 10, "bajo"),
        (10, 10, "ok"),
        (5, 0, "ok"),
    ],
)
def test_nivel_stock(total, reorden, esperado):
    assert nivel_stock(total, reorden) == esperado
