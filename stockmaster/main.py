from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware  # CORS

from stockmaster.logging_config import setup_logging
from stockmaster.models.database import create_db_and_tables
from stockmaster.routers import (
    auth,
    dashboard,
    documents,
    movements,
    otp,
    products,
    stock,
    warehouses,
)
from stockmaster.routers.websocket import router as websocket_router
from stockmaster.utils.getenv import get_list_env


# Configurar logging y crear las tablas al iniciar la aplicación
@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    create_db_and_tables()
    yield


app = FastAPI(title="StockMaster", lifespan=lifespan)

# Configuración CORS para cookies (refresh token)
app.add_middleware(
    CORSMiddleware,
    allow_origins=get_list_env("CORS_ORIGINS", ["http://localhost:5173"]),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Incluir routers
app.include_router(auth.router)
app.include_router(products.router)
app.include_router(warehouses.router)
app.include_router(stock.router)
app.include_router(documents.router)
app.include_router(movements.router)
app.include_router(dashboard.router)
app.include_router(otp.router)
# Websocket
app.include_router(websocket_router)


@app.get("/")
def read_root():
    return {"message": "API funcionando correctamente"}
