from pydantic import BaseModel, Field
from typing import Optional


class SendOtpRequest(BaseModel):
    email: Optional[str] = None


class VerifyOtpRequest(BaseModel):
    email: Optional[str] = None
    otp: Optional[str] = None


class ResetPasswordRequest(BaseModel):
    email: Optional[str] = None
    newPassword: Optional[str] = None


class OtpResponse(BaseModel):
    """Formato común de respuesta de los endpoints OTP."""

    success: bool
    message: Optional[str] = Field(None)
    error: Optional[str] = Field(None)
