from sqlmodel import SQLModel, Field


class Stock(SQLModel, table=True):
    """Cantidad disponible de un producto en un almacén.
    Si no existe la fila, la cantidad es 0."""

    __tablename__ = "stock"

    id_producto: int = Field(
        foreign_key="producto.id",
        primary_key=True,
        description="Producto asociado",
    )
    id_almacen: int = Field(
        foreign_key="almacen.id",
        primary_key=True,
        description="Almacén asociado",
    )
    cantidad: int = Field(
        default=0, nullable=False, ge=0, description="Unidades en stock (mínimo 0)"
    )
