"""
Backend API Client Module.

This module is the single place where request/response calls to the logistics
backend are made. The push channel (channel.py) is a separate transport and
does not go through here.

Key principles:
- Every failure (timeout, connection error, non-2xx) is raised as BackendError
  with a message fit for showing to the user
- Empty filters are never sent to the backend
- Responses are validated into models before they leave this module

# NOTE: When adding new endpoints, follow this pattern:
    - Build the URL from get_backend_url()
    - Call requests via _request() so timeouts and errors are handled uniformly
    - Return parsed models, never raw Response objects
"""

from typing import Any, Dict, List, Optional, Union
from urllib.parse import quote

import requests

from .config import BackendConfig
from .exceptions import BackendError
from .models import CartItem, Movement, ProductRecord, parse_cart_items, parse_movements


def get_backend_url() -> str:
    """
    Get the backend API base URL.

    Returns:
        Backend URL string with trailing slash removed. Defaults to
        http://127.0.0.1:5000 for local development; set BACKEND_URL elsewhere.
    """
    return BackendConfig.get_backend_url()


def _request(method: str, path: str, failure_message: str, **kwargs: Any) -> requests.Response:
    """
    Perform one HTTP call and translate transport failures into BackendError.

    Non-2xx responses are returned as-is; callers decide how to read them.
    """
    url = f"{get_backend_url()}{path}"
    try:
        return requests.request(method, url, timeout=BackendConfig.get_request_timeout(), **kwargs)
    except requests.exceptions.Timeout:
        raise BackendError(f"{failure_message}: request timed out")
    except requests.exceptions.ConnectionError:
        raise BackendError(f"{failure_message}: could not connect to backend")
    except requests.exceptions.RequestException as e:
        raise BackendError(f"{failure_message}: {str(e)}")


def _json_or_none(response: requests.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return None


def search_movements(
    id: Optional[Union[int, str]] = None,
    ean: Optional[str] = None,
    material: Optional[str] = None,
) -> List[Movement]:
    """
    Search stock movements by id, EAN and/or material code.

    Args:
        id: Movement identifier (optional)
        ean: EAN barcode (optional)
        material: Material code (optional)

    Returns:
        List of Movement rows (empty if the backend returns anything but a list).

    Raises:
        BackendError: On network failure or non-2xx status.
    """
    # Build query parameters - only include non-empty values
    params: Dict[str, Any] = {}
    for name, value in (("id", id), ("ean", ean), ("material", material)):
        if value is not None and value != "":
            params[name] = value

    failure = "Failed to query movements"
    response = _request("GET", "/movimentacoes", failure, params=params)
    if not response.ok:
        raise BackendError(failure, status_code=response.status_code)
    return parse_movements(_json_or_none(response))


def lookup_product(valor: Union[str, int]) -> ProductRecord:
    """
    Look up a single product by material code or EAN.

    Args:
        valor: Material code or EAN, as typed by the user

    Returns:
        The matching ProductRecord.

    Raises:
        BackendError: With the backend's "erro" text when it provides one,
            "Product not found" otherwise.
    """
    response = _request("POST", "/buscar_produto", "Failed to look up product", json={"valor": valor})
    data = _json_or_none(response)
    if not response.ok:
        message = None
        if isinstance(data, dict):
            message = data.get("erro")
        raise BackendError(message or "Product not found", status_code=response.status_code)
    if not isinstance(data, dict):
        raise BackendError("Product not found", status_code=response.status_code)
    return ProductRecord(**data)


def fetch_cart(session_key: str) -> List[CartItem]:
    """
    Fetch the server-held cart for a key.

    Args:
        session_key: The active cart key

    Returns:
        List of CartItem in server order (empty if the backend returns a non-list).

    Raises:
        BackendError: On network failure or non-2xx status.
    """
    failure = "Error loading cart"
    response = _request("GET", f"/carrinho/{quote(session_key, safe='')}", failure)
    if not response.ok:
        raise BackendError(failure, status_code=response.status_code)
    return parse_cart_items(_json_or_none(response))
