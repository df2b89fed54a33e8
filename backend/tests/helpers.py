"""Shared constants and helpers for API tests."""
API = "/api/v1/users"
PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32


def cookie_value(response, cookie_name: str) -> str | None:
    """Value of a cookie set by ``response``, or None if it wasn't set."""
    for header in response.headers.get_list("set-cookie"):
        token_part = header.split(";", 1)[0]
        name, value = token_part.split("=", 1)
        if name == cookie_name:
            return value.strip('"')
    return None


def set_cookie_header(response, cookie_name: str) -> str | None:
    for header in response.headers.get_list("set-cookie"):
        if header.startswith(f"{cookie_name}="):
            return header
    return None


def auth_headers(login_response) -> dict[str, str]:
    return {"Authorization": f"Bearer {login_response.json()['data']['accessToken']}"}
