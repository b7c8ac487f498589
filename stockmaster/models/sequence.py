from sqlmodel import SQLModel, Field


class DocumentSequence(SQLModel, table=True):
    """Último número emitido por cada prefijo de documento (REC, DEL, TRF, ADJ)."""

    __tablename__ = "secuencia_documento"

    prefijo: str = Field(primary_key=True, max_length=10)
    ultimo: int = Field(default=0, nullable=False, ge=0)
