REFRESH_URL = "/api/v1/auth/refresh"


def set_cookies(response) -> dict:
    """Map cookie name -> (value, raw Set-Cookie header)."""
    cookies = {}
    for header in response.headers.getlist("Set-Cookie"):
        name, rest = header.split("=", 1)
        cookies[name] = (rest.split(";", 1)[0], header)
    return cookies


def register_and_login(client, email="a@x.com", password="Passw0rd1"):
    resp = client.post("/api/v1/auth/register", json={"email": email, "password": password})
    assert resp.status_code == 201, resp.get_json()
    resp = client.post("/api/v1/auth/login", json={"email": email, "password": password})
    assert resp.status_code == 200, resp.get_json()
    return resp
