"""
Tests de API - Autenticación
"""
PASSWORD = "secreto123"


class TestAuthAPI:
    """Registro, login y protección de rutas"""

    def test_registro(self, client):
        r = client.post(
            "/auth/registro",
            json={"nombre": "Luis", "email": "Luis@Stockmaster.es", "passwd": "clave1234"},
        )
        assert r.status_code == 201
        data = r.json()
        assert data["email"] == "luis@stockmaster.es"
        assert data["activo"] is True
        assert "passwd" not in data

    def test_registro_email_duplicado(self, client, usuario):
        r = client.post(
            "/auth/registro",
            json={"nombre": "Otra Ana", "email": usuario.email, "passwd": "clave1234"},
        )
        assert r.status_code == 400

    def test_login_sin_credenciales(self, client):
        """POST /auth/login sin cuerpo debe retornar 422"""
        r = client.post("/auth/login")
        assert r.status_code == 422

    def test_login_credenciales_invalidas(self, client, usuario):
        r = client.post(
            "/auth/login", data={"username": usuario.email, "password": "incorrecta"}
        )
        assert r.status_code == 401

    def test_login_y_perfil(self, client, usuario):
        r = client.post(
            "/auth/login", data={"username": usuario.email, "password": PASSWORD}
        )
        assert r.status_code == 200
        token = r.json()["access_token"]
        assert "refresh_token" in r.cookies

        r = client.get("/auth/perfil", headers={"Authorization": f"Bearer {token}"})
        assert r.status_code == 200
        assert r.json()["id"] == usuario.id

    def test_rutas_protegidas_sin_token(self, client):
        for ruta in ("/productos/", "/almacenes/", "/documentos/", "/movimientos/", "/stock/"):
            assert client.get(ruta).status_code == 401

    def test_token_invalido(self, client):
        r = client.get("/auth/perfil", headers={"Authorization": "Bearer token_invalido"})
        assert r.status_code == 401
