"""
Fixtures comunes.

La base de datos es SQLite en memoria (StaticPool: una sola conexión
compartida entre el test y los hilos del TestClient). La sesión del test es
la misma que usan las rutas, así que el estado se puede comprobar directamente.
"""
import os

# Antes de importar la aplicación: la configuración se lee al importar
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SECRET_KEY", "clave-de-pruebas")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from stockmaster.main import app
from stockmaster.models.database import get_db
from stockmaster.models.product import Product
from stockmaster.models.stock import Stock
from stockmaster.models.user import User
from stockmaster.models.warehouse import Warehouse
from stockmaster.utils.authentication import hash_password

PASSWORD = "secreto123"


@pytest.fixture
def session():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    with Session(engine) as session:
        yield session
    SQLModel.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def client(session):
    """Cliente HTTP sin autenticar."""

    def get_db_override():
        yield session

    app.dependency_overrides[get_db] = get_db_override
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def usuario(session):
    user = User(
        nombre="Ana Almacén",
        email="ana@stockmaster.es",
        passwd=hash_password(PASSWORD),
        activo=True,
    )
    session.add(user)
    session.commit()
    session.refresh(user)
    return user


@pytest.fixture
def auth_client(client, usuario):
    """Cliente con el token del usuario de pruebas."""
    r = client.post(
        "/auth/login", data={"username": usuario.email, "password": PASSWORD}
    )
    assert r.status_code == 200
    client.headers["Authorization"] = f"Bearer {r.json()['access_token']}"
    return client


@pytest.fixture
def crear_producto(session):
    def _crear(sku="PRD-001", nombre="Tornillo", nivel_reorden=10, categoria="Tools"):
        producto = Product(
            sku=sku,
            nombre=nombre,
            categoria=categoria,
            unidad_medida="pcs",
            nivel_reorden=nivel_reorden,
        )
        session.add(producto)
        session.commit()
        session.refresh(producto)
        return producto

    return _crear


@pytest.fixture
def crear_almacen(session):
    def _crear(codigo="WH1", nombre="Almacén central"):
        almacen = Warehouse(codigo=codigo, nombre=nombre, direccion="")
        session.add(almacen)
        session.commit()
        session.refresh(almacen)
        return almacen

    return _crear


@pytest.fixture
def fijar_stock(session):
    """Deja el saldo de (producto, almacén) en una cantidad concreta."""

    def _fijar(producto, almacen, cantidad):
        stock = session.get(Stock, (producto.id, almacen.id))
        if stock is None:
            stock = Stock(id_producto=producto.id, id_almacen=almacen.id, cantidad=cantidad)
        else:
            stock.cantidad = cantidad
        session.add(stock)
        session.commit()
        return stock

    return _fijar
