from sqlmodel import SQLModel, Field


class Warehouse(SQLModel, table=True):
    __tablename__ = "almacen"

    id: int = Field(default=None, primary_key=True)
    codigo: str = Field(unique=True, index=True, nullable=False, max_length=20)
    nombre: str = Field(nullable=False, max_length=255)
    direccion: str = Field(default="", max_length=500)


# Jerarquía de ubicaciones: Almacén → Estantería → Sección → Ubicación (bin).
# Solo identifica posiciones; el stock se lleva por almacén.


class Rack(SQLModel, table=True):
    __tablename__ = "estanteria"

    id: int = Field(default=None, primary_key=True)
    id_almacen: int = Field(foreign_key="almacen.id", nullable=False, index=True)
    nombre: str = Field(nullable=False, max_length=100)


class Section(SQLModel, table=True):
    __tablename__ = "seccion"

    id: int = Field(default=None, primary_key=True)
    id_estanteria: int = Field(foreign_key="estanteria.id", nullable=False, index=True)
    nombre: str = Field(nullable=False, max_length=100)


class Bin(SQLModel, table=True):
    __tablename__ = "ubicacion"

    id: int = Field(default=None, primary_key=True)
    id_seccion: int = Field(foreign_key="seccion.id", nullable=False, index=True)
    nombre: str = Field(nullable=False, max_length=100)
