import logging
import requests
from typing import Any, List

from constants import DEFAULT_API_URL, JSON_HEADERS, REQUEST_TIMEOUT
from recipe_models import Ingredient, InfusionRecipe

logger = logging.getLogger(__name__)


class ThermaFlowAPIError(RuntimeError):
    """Raised when the recipe backend answers with a non-2xx status."""

    def __init__(self, status_code: int, body: str):
        super().__init__(f"ThermaFlow API error {status_code}: {body}")
        self.status_code = status_code
        self.body = body


# failures a call can surface: transport, HTTP status, malformed body
GATEWAY_ERRORS = (requests.RequestException, ThermaFlowAPIError, ValueError, KeyError)


def _url(base_url: str, path: str) -> str:
    return f"{(base_url or DEFAULT_API_URL).rstrip('/')}{path}"


def _check(resp: requests.Response) -> requests.Response:
    if not resp.ok:
        raise ThermaFlowAPIError(resp.status_code, resp.text)
    return resp


def _get(base_url: str, path: str) -> Any:
    url = _url(base_url, path)
    logger.debug("GET %s", url)
    resp = requests.get(url, headers=JSON_HEADERS, timeout=REQUEST_TIMEOUT)
    return _check(resp).json()


def list_recipes(base_url: str) -> List[InfusionRecipe]:
    return [InfusionRecipe.from_payload(r) for r in _get(base_url, "/recipes")]


def get_recipe(base_url: str, recipe_id: int) -> InfusionRecipe:
    return InfusionRecipe.from_payload(_get(base_url, f"/recipes/{recipe_id}"))


def create_recipe(base_url: str, recipe: InfusionRecipe) -> InfusionRecipe:
    url = _url(base_url, "/recipes")
    payload = recipe.to_payload()
    # the backend assigns ids and computes totals
    for key in ("id", "totalDuration", "totalCost"):
        payload.pop(key, None)
    logger.debug("POST %s (%d steps)", url, len(payload["steps"]))
    resp = requests.post(url, headers=JSON_HEADERS, json=payload, timeout=REQUEST_TIMEOUT)
    return InfusionRecipe.from_payload(_check(resp).json())


def delete_recipe(base_url: str, recipe_id: int) -> None:
    url = _url(base_url, f"/recipes/{recipe_id}")
    logger.debug("DELETE %s", url)
    resp = requests.delete(url, headers=JSON_HEADERS, timeout=REQUEST_TIMEOUT)
    _check(resp)


def list_ingredients(base_url: str) -> List[Ingredient]:
    return [Ingredient.from_payload(i) for i in _get(base_url, "/ingredients")]
