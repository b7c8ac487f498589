from datetime import datetime
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlmodel import Session, func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from stockmaster.models.database import get_db
from stockmaster.models.product import Categoria, Product
from stockmaster.models.user import User
from stockmaster.routers.auth import get_current_user
from stockmaster.schemas.product import (
    PaginatedProductResponse,
    ProductCreate,
    ProductDetailResponse,
    ProductResponse,
    ProductUpdate,
)
from stockmaster.services.stock import nivel_stock, stock_por_producto, stock_total

router = APIRouter(prefix="/productos", tags=["Productos"])


@router.get("/", response_model=PaginatedProductResponse)
def get_products(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    limit: int = Query(10, ge=1, le=1000),
    offset: int = Query(0, ge=0),
    search: Optional[str] = Query(None),
    categoria: Optional[Categoria] = Query(None),
):
    """Lista los productos, ordenados por nombre."""
    try:
        statement = select(Product)

        if search:
            # Filtra por nombre o sku (mayúsculas o minúsculas)
            search_like = f"%{search.lower()}%"
            statement = statement.where(
                func.lower(Product.nombre).like(search_like)
                | func.lower(Product.sku).like(search_like)
            )

        if categoria:
            statement = statement.where(Product.categoria == categoria.value)

        products = db.exec(
            statement.order_by(Product.nombre).limit(limit).offset(offset)
        ).all()

        # Conteo total SIN paginar
        total_records = (
            db.exec(select(func.count()).select_from(statement.subquery())).first() or 0
        )

    except SQLAlchemyError:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Error de conexión con la base de datos",
        )

    return {
        "data": products,
        "total": total_records,
        "limit": limit,
        "offset": offset,
    }


@router.get("/{id}", response_model=ProductDetailResponse)
def get_product(
    id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Obtiene un producto con su stock total, el desglose por almacén y el nivel de stock."""
    try:
        product = db.get(Product, id)
        if product:
            total = stock_total(db, id)
            por_almacen = stock_por_producto(db, id)
    except SQLAlchemyError:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Error de conexión con la base de datos",
        )

    if not product:
        raise HTTPException(status_code=404, detail="Producto no encontrado")

    return {
        **product.model_dump(),
        "stock_total": total,
        "nivel_stock": nivel_stock(total, product.nivel_reorden),
        "stock_por_almacen": por_almacen,
    }


@router.post("/", response_model=ProductResponse, status_code=status.HTTP_201_CREATED)
def create_product(
    product_data: ProductCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Crea un nuevo producto. El SKU es único."""

    # Verificar si el SKU ya existe
    try:
        statement = select(Product).where(Product.sku == product_data.sku)
        existing_product = db.exec(statement).first()
    except SQLAlchemyError:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Error de conexión con la base de datos",
        )

    if existing_product:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="El SKU ya está registrado."
        )

    new_product = Product(
        sku=product_data.sku,
        nombre=product_data.nombre,
        descripcion=product_data.descripcion,
        categoria=product_data.categoria.value,
        unidad_medida=product_data.unidad_medida.value,
        nivel_reorden=product_data.nivel_reorden,
    )

    try:
        db.add(new_product)
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Error de integridad en la base de datos. Verifica los datos enviados.",
        )
    except SQLAlchemyError:
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Error interno al crear el producto.",
        )
    db.refresh(new_product)

    return new_product


@router.put("/{id}", response_model=ProductResponse)
def update_product(
    id: int,
    product_update: ProductUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Actualiza solo los campos enviados y renueva `actualizado_en`."""

    try:
        product = db.get(Product, id)
        if not product:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND, detail="Producto no encontrado"
            )
        # Validar si el nuevo SKU ya existe en otro producto
        if product_update.sku:
            statement = select(Product).where(
                Product.sku == product_update.sku, Product.id != id
            )
            existing_product = db.exec(statement).first()
            if existing_product:
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail="El SKU ya está en uso",
                )
    except SQLAlchemyError:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Error de conexión con la base de datos",
        )

    cambios = product_update.model_dump(exclude_unset=True)
    for campo, valor in cambios.items():
        if valor is None:
            continue
        # Los enums se guardan por su valor
        setattr(product, campo, getattr(valor, "value", valor))
    product.actualizado_en = datetime.now()

    try:
        db.add(product)
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Error de integridad en la base de datos. Verifica los datos enviados.",
        )
    except SQLAlchemyError:
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Error interno al actualizar el producto.",
        )
    db.refresh(product)

    return product
