import base64


def basic_auth(email: str, password: str) -> dict[str, str]:
    token = base64.b64encode(f"{email}:{password}".encode()).decode()
    return {"Authorization": f"Basic {token}"}


def from_ip(ip: str) -> dict[str, str]:
    return {"X-Forwarded-For": ip}
