from pydantic import BaseModel, EmailStr, Field


class UserBase(BaseModel):
    """
    Esquema base para usuarios.
    - `EmailStr` valida que el correo tenga formato correcto.
    """

    nombre: str = Field(
        ..., min_length=3, max_length=100, description="Nombre del usuario"
    )
    email: EmailStr = Field(
        ..., max_length=100, description="Correo electrónico válido"
    )


class UserCreate(UserBase):
    passwd: str = Field(
        ...,
        min_length=8,
        max_length=72,
        description="Contraseña (mínimo 8 caracteres)",
    )


class UserResponse(UserBase):
    """No incluye `passwd` por seguridad."""

    id: int
    activo: bool

    class Config:
        from_attributes = True
