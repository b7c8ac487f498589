"""
Tests de API - Restablecimiento de contraseña por OTP.
El envío de correo se sustituye por una función que guarda el código.
"""
import re
import smtplib
from datetime import datetime, timedelta

import pytest
from sqlmodel import select

from stockmaster.models.otp import Otp
from stockmaster.utils.authentication import verify_password


@pytest.fixture
def buzon(monkeypatch):
    """Correos enviados: lista de (destinatario, código)."""
    enviados = []

    def enviar_correo(destinatario, asunto, texto, html=None):
        enviados.append((destinatario, re.search(r"\d{6}", texto).group()))

    monkeypatch.setattr("stockmaster.services.otp.enviar_correo", enviar_correo)
    return enviados


def _enviar(client, email):
    return client.post("/otp/sendOtpEmail", json={"email": email})


class TestEnviarOtp:
    def test_envia_y_guarda_solo_el_hash(self, client, session, buzon):
        r = _enviar(client, "  Ana@StockMaster.es ")

        assert r.status_code == 200
        assert r.json()["success"] is True
        destinatario, codigo = buzon[0]
        assert destinatario == "ana@stockmaster.es"

        registro = session.exec(select(Otp)).one()
        assert registro.email == "ana@stockmaster.es"
        assert registro.otp_hash != codigo
        assert registro.usado is False
        assert registro.expira_en > datetime.now()

    @pytest.mark.parametrize("body", [{}, {"email": ""}, {"email": "no-es-un-email"}])
    def test_email_invalido(self, client, buzon, body):
        r = client.post("/otp/sendOtpEmail", json=body)
        assert r.status_code == 400
        assert r.json()["success"] is False
        assert buzon == []

    def test_nuevo_otp_invalida_el_anterior(self, client, session, buzon):
        _enviar(client, "ana@stockmaster.es")
        _enviar(client, "ana@stockmaster.es")

        registros = session.exec(select(Otp).order_by(Otp.id)).all()
        assert [o.usado for o in registros] == [True, False]

        primer_codigo = buzon[0][1]
        if primer_codigo != buzon[1][1]:
            r = client.post(
                "/otp/verifyOtp", json={"email": "ana@stockmaster.es", "otp": primer_codigo}
            )
            assert r.status_code == 400

    def test_fallo_smtp(self, client, monkeypatch):
        def enviar_correo(*args, **kwargs):
            raise smtplib.SMTPException("servidor caído")

        monkeypatch.setattr("stockmaster.services.otp.enviar_correo", enviar_correo)

        r = _enviar(client, "ana@stockmaster.es")

        assert r.status_code == 500
        assert r.json()["success"] is False
        assert "servidor caído" not in r.json()["error"]

    def test_solo_post(self, client):
        assert client.get("/otp/sendOtpEmail").status_code == 405


class TestVerificarOtp:
    def test_codigo_correcto(self, client, session, buzon):
        _enviar(client, "ana@stockmaster.es")
        codigo = buzon[0][1]

        r = client.post("/otp/verifyOtp", json={"email": "ana@stockmaster.es", "otp": codigo})

        assert r.status_code == 200
        registro = session.exec(select(Otp)).one()
        assert registro.usado is True
        assert registro.verificado_en is not None

    def test_codigo_incorrecto(self, client, buzon):
        _enviar(client, "ana@stockmaster.es")
        # Los códigos generados van de 100000 a 999999
        r = client.post("/otp/verifyOtp", json={"email": "ana@stockmaster.es", "otp": "000000"})
        assert r.status_code == 400

    @pytest.mark.parametrize("otp", [None, "12345", "abcdef", "1234567"])
    def test_formato_incorrecto(self, client, otp):
        r = client.post("/otp/verifyOtp", json={"email": "ana@stockmaster.es", "otp": otp})
        assert r.status_code == 400

    def test_sin_otp_pendiente(self, client):
        r = client.post("/otp/verifyOtp", json={"email": "ana@stockmaster.es", "otp": "123456"})
        assert r.status_code == 404

    def test_otp_caducado(self, client, session, buzon):
        _enviar(client, "ana@stockmaster.es")
        registro = session.exec(select(Otp)).one()
        registro.expira_en = datetime.now() - timedelta(minutes=1)
        session.add(registro)
        session.commit()

        r = client.post(
            "/otp/verifyOtp", json={"email": "ana@stockmaster.es", "otp": buzon[0][1]}
        )

        assert r.status_code == 400
        assert "caducado" in r.json()["error"]
        session.refresh(registro)
        assert registro.usado is True


class TestRestablecerPassword:
    def _verificar(self, client, buzon, email):
        _enviar(client, email)
        r = client.post("/otp/verifyOtp", json={"email": email, "otp": buzon[-1][1]})
        assert r.status_code == 200

    def test_flujo_completo(self, client, session, usuario, buzon):
        self._verificar(client, buzon, usuario.email)

        r = client.post(
            "/otp/resetPassword",
            json={"email": usuario.email, "newPassword": "nueva-clave-1"},
        )

        assert r.status_code == 200
        session.refresh(usuario)
        assert verify_password("nueva-clave-1", usuario.passwd)

        r = client.post(
            "/auth/login", data={"username": usuario.email, "password": "nueva-clave-1"}
        )
        assert r.status_code == 200

    def test_la_verificacion_solo_sirve_una_vez(self, client, usuario, buzon):
        self._verificar(client, buzon, usuario.email)
        body = {"email": usuario.email, "newPassword": "nueva-clave-1"}

        assert client.post("/otp/resetPassword", json=body).status_code == 200
        assert client.post("/otp/resetPassword", json=body).status_code == 400

    def test_sin_verificar(self, client, usuario, buzon):
        _enviar(client, usuario.email)
        r = client.post(
            "/otp/resetPassword",
            json={"email": usuario.email, "newPassword": "nueva-clave-1"},
        )
        assert r.status_code == 400

    def test_verificacion_antigua(self, client, session, usuario, buzon):
        self._verificar(client, buzon, usuario.email)
        registro = session.exec(select(Otp)).one()
        registro.verificado_en = datetime.now() - timedelta(minutes=31)
        session.add(registro)
        session.commit()

        r = client.post(
            "/otp/resetPassword",
            json={"email": usuario.email, "newPassword": "nueva-clave-1"},
        )
        assert r.status_code == 400

    def test_password_corta(self, client, usuario, buzon):
        self._verificar(client, buzon, usuario.email)
        r = client.post(
            "/otp/resetPassword", json={"email": usuario.email, "newPassword": "corta"}
        )
        assert r.status_code == 400

    def test_usuario_inexistente(self, client, buzon):
        self._verificar(client, buzon, "nadie@stockmaster.es")
        r = client.post(
            "/otp/resetPassword",
            json={"email": "nadie@stockmaster.es", "newPassword": "nueva-clave-1"},
        )
        assert r.status_code == 404
