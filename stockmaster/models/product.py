from datetime import datetime
from enum import Enum
from typing import Optional
from sqlmodel import SQLModel, Field


class Categoria(str, Enum):
    ELECTRONICS = "Electronics"
    FURNITURE = "Furniture"
    CLOTHING = "Clothing"
    FOOD = "Food"
    BOOKS = "Books"
    TOOLS = "Tools"
    OTHER = "Other"


class UnidadMedida(str, Enum):
    PCS = "pcs"
    KG = "kg"
    LBS = "lbs"
    BOX = "box"
    CARTON = "carton"
    DOZEN = "dozen"


class Product(SQLModel, table=True):
    __tablename__ = "producto"

    id: int = Field(default=None, primary_key=True, nullable=False)
    sku: str = Field(unique=True, index=True, nullable=False)
    nombre: str = Field(nullable=False)
    descripcion: Optional[str] = Field(default=None)
    categoria: str = Field(nullable=False)  # valores de `Categoria`
    unidad_medida: str = Field(nullable=False)  # valores de `UnidadMedida`
    nivel_reorden: int = Field(default=0, nullable=False, ge=0)
    creado_en: datetime = Field(default_factory=lambda: datetime.now())
    actualizado_en: datetime = Field(default_factory=lambda: datetime.now())
