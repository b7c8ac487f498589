from datetime import datetime
from typing import Optional
from sqlmodel import SQLModel, Field


class Otp(SQLModel, table=True):
    __tablename__ = "otp"

    id: int = Field(default=None, primary_key=True)
    email: str = Field(nullable=False, index=True)
    otp_hash: str = Field(nullable=False)  # Nunca se guarda el código en claro
    expira_en: datetime = Field(nullable=False)
    usado: bool = Field(default=False, nullable=False)
    creado_en: datetime = Field(default_factory=lambda: datetime.now())
    verificado_en: Optional[datetime] = Field(default=None)
    reset_realizado: bool = Field(default=False, nullable=False)  # la verificación ya se consumió
