"""
Errores de dominio del inventario.

Los servicios lanzan estas excepciones y los routers las traducen a
`HTTPException` con `to_http()`. Cada una lleva su código HTTP.
"""
from fastapi import HTTPException, status


class InventarioError(Exception):
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, mensaje: str):
        super().__init__(mensaje)
        self.mensaje = mensaje

    def to_http(self) -> HTTPException:
        return HTTPException(status_code=self.status_code, detail=self.mensaje)


class NoEncontrado(InventarioError):
    status_code = status.HTTP_404_NOT_FOUND


class StockInsuficiente(InventarioError):
    """La operación dejaría el stock en negativo."""

    status_code = status.HTTP_409_CONFLICT

    def __init__(
        self,
        disponible: int,
        requerido: int,
        id_producto: int | None = None,
        id_almacen: int | None = None,
    ):
        self.disponible = disponible
        self.requerido = requerido
        self.id_producto = id_producto
        self.id_almacen = id_almacen
        mensaje = f"Stock insuficiente. Disponible: {disponible}, Requerido: {requerido}"
        if id_producto is not None and id_almacen is not None:
            mensaje += f" (producto {id_producto}, almacén {id_almacen})"
        super().__init__(mensaje)


class AlmacenesInvalidos(InventarioError):
    """Transferencia con el mismo almacén de origen y destino."""


class DocumentoVacio(InventarioError):
    """El documento no tiene ninguna línea válida."""


class TransicionInvalida(InventarioError):
    status_code = status.HTTP_409_CONFLICT


class CodigoDuplicado(InventarioError):
    pass


class MovimientoInvalido(InventarioError):
    pass


class LedgerInmutable(InventarioError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


class ReferenciaInvalida(InventarioError):
    """El documento hace referencia a productos o almacenes que no existen."""


class OtpInvalido(InventarioError):
    """Datos de entrada del flujo OTP incorrectos o código no válido."""
