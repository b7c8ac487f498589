import logging
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlmodel import Session, func, select
from sqlalchemy.exc import SQLAlchemyError, IntegrityError

from stockmaster.exceptions import CodigoDuplicado
from stockmaster.models.database import get_db
from stockmaster.models.warehouse import Bin, Rack, Section, Warehouse
from stockmaster.models.user import User
from stockmaster.routers.auth import get_current_user
from stockmaster.schemas.warehouse import (
    BinResponse,
    LocationCreate,
    PaginatedWarehouseResponse,
    RackResponse,
    SectionResponse,
    WarehouseCreate,
    WarehouseResponse,
    WarehouseTreeResponse,
    WarehouseUpdate,
)
from stockmaster.utils.validation import normalize_code

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/almacenes", tags=["Almacenes"])


def _db_error():
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail="Error de conexión con la base de datos",
    )


def _guardar(db: Session, objeto, detalle: str):
    try:
        db.add(objeto)
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Error de integridad en la base de datos.",
        )
    except SQLAlchemyError:
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=detalle
        )
    db.refresh(objeto)
    return objeto


@router.get("/", response_model=PaginatedWarehouseResponse)
def get_warehouses(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    limit: int = Query(10, ge=1, le=1000),
    offset: int = Query(0, ge=0),
    search: Optional[str] = Query(None),
):
    """Lista los almacenes, buscando por código o nombre."""
    try:
        statement = select(Warehouse)

        if search:
            search_like = f"%{search.lower()}%"
            statement = statement.where(
                func.lower(Warehouse.nombre).like(search_like)
                | func.lower(Warehouse.codigo).like(search_like)
            )

        paginated = statement.order_by(Warehouse.nombre).limit(limit).offset(offset)
        warehouses = db.exec(paginated).all()

        total_records = (
            db.exec(select(func.count()).select_from(statement.subquery())).first() or 0
        )

    except SQLAlchemyError:
        raise _db_error()
    return {
        "data": warehouses,
        "total": total_records,
        "limit": limit,
        "offset": offset,
    }


@router.get("/{id}", response_model=WarehouseTreeResponse)
def get_warehouse(
    id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Obtiene un almacén con su árbol de estanterías, secciones y ubicaciones."""
    try:
        warehouse = db.get(Warehouse, id)
        if warehouse:
            racks = db.exec(
                select(Rack).where(Rack.id_almacen == id).order_by(Rack.id)
            ).all()
            sections = db.exec(
                select(Section)
                .where(Section.id_estanteria.in_([rack.id for rack in racks]))
                .order_by(Section.id)
            ).all()
            bins = db.exec(
                select(Bin)
                .where(Bin.id_seccion.in_([section.id for section in sections]))
                .order_by(Bin.id)
            ).all()
    except SQLAlchemyError:
        raise _db_error()

    if not warehouse:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Almacén no encontrado."
        )

    return WarehouseTreeResponse(
        **warehouse.model_dump(),
        estanterias=[
            RackResponse(
                **rack.model_dump(),
                secciones=[
                    SectionResponse(
                        **section.model_dump(),
                        ubicaciones=[
                            BinResponse.model_validate(b)
                            for b in bins
                            if b.id_seccion == section.id
                        ],
                    )
                    for section in sections
                    if section.id_estanteria == rack.id
                ],
            )
            for rack in racks
        ],
    )


@router.post("/", response_model=WarehouseResponse, status_code=status.HTTP_201_CREATED)
def create_warehouse(
    warehouse_data: WarehouseCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Crea un almacén. El código se normaliza (sin espacios, en mayúsculas) y es único."""
    codigo = normalize_code(warehouse_data.codigo)
    try:
        existing = db.exec(select(Warehouse).where(Warehouse.codigo == codigo)).first()
    except SQLAlchemyError:
        raise _db_error()
    if existing:
        raise CodigoDuplicado(f"Ya existe un almacén con el código {codigo}.").to_http()

    new_warehouse = Warehouse(
        codigo=codigo,
        nombre=warehouse_data.nombre.strip(),
        direccion=warehouse_data.direccion.strip(),
    )
    _guardar(db, new_warehouse, "Error interno del servidor al registrar el almacén.")
    logger.info("Almacén %s creado", new_warehouse.codigo)
    return new_warehouse


@router.put("/{id}", response_model=WarehouseResponse)
def update_warehouse(
    id: int,
    warehouse_update: WarehouseUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Edita el nombre o la dirección de un almacén."""
    try:
        warehouse = db.get(Warehouse, id)
    except SQLAlchemyError:
        raise _db_error()

    if not warehouse:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Almacén no encontrado"
        )

    # Actualizar solo los campos enviados
    if warehouse_update.nombre:
        warehouse.nombre = warehouse_update.nombre.strip()
    if warehouse_update.direccion is not None:
        warehouse.direccion = warehouse_update.direccion.strip()

    return _guardar(
        db, warehouse, "Error interno del servidor al actualizar el almacén."
    )


### UBICACIONES ###
def _padre(db: Session, modelo, id: int, detalle: str):
    try:
        padre = db.get(modelo, id)
    except SQLAlchemyError:
        raise _db_error()
    if not padre:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=detalle)
    return padre


@router.post(
    "/{id}/estanterias",
    response_model=RackResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_rack(
    id: int,
    data: LocationCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    _padre(db, Warehouse, id, "Almacén no encontrado")
    rack = Rack(id_almacen=id, nombre=data.nombre.strip())
    return _guardar(db, rack, "Error interno al crear la estantería.")


@router.post(
    "/estanterias/{id}/secciones",
    response_model=SectionResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_section(
    id: int,
    data: LocationCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    _padre(db, Rack, id, "Estantería no encontrada")
    section = Section(id_estanteria=id, nombre=data.nombre.strip())
    return _guardar(db, section, "Error interno al crear la sección.")


@router.post(
    "/secciones/{id}/ubicaciones",
    response_model=BinResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_bin(
    id: int,
    data: LocationCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    _padre(db, Section, id, "Sección no encontrada")
    ubicacion = Bin(id_seccion=id, nombre=data.nombre.strip())
    return _guardar(db, ubicacion, "Error interno al crear la ubicación.")
