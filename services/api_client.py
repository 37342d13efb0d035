"""
HTTP client for the shop backend REST API.

Every endpoint the client consumes is wrapped here. Requests carry the
session's bearer token, are bounded by the configured timeout and are never
retried; responses are validated against the models in ``models`` before
they reach the rest of the client.
"""

import time
from typing import Any, Callable, Dict, Optional, Tuple, Type, TypeVar

import requests
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from models import (AddDebtRequest, Category, CategoryInput, DebtHistoryEntry,
                    DebtUpdateRequest, LoginRequest, LoginResponse,
                    ProductInput, ProductPage, ProductQuery, RegisterRequest,
                    Transaction, TransactionCreate, TransactionUpdate, User)
from services.config import config
from services.exceptions import (APIError, AuthorizationError, NetworkError,
                                 NotFoundError)
from utils.logging import log_error, log_request, log_response, setup_logger
from utils.messages import translate
from utils.responses import (AUTH_FAILURE_STATUSES, JSON_HEADERS, HTTPStatus,
                             encode_body, error_message_from, unwrap_data)
from utils.security import bearer_header

logger = setup_logger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


class ShopAPIClient:
    """
    Thin client over ``requests`` for the backend described by ``SHOP_API_URL``.

    The token is read through ``token_provider`` on every call so that the
    session object stays the single owner of the credential.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        http: Optional[requests.Session] = None,
        token_provider: Optional[Callable[[], Optional[str]]] = None,
    ):
        self.base_url = (base_url or config.api_url).rstrip("/")
        self.timeout = timeout or config.request_timeout
        self.http = http or requests.Session()
        self.token_provider = token_provider

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    def request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        body: Any = None,
        auth: bool = True,
        fallback: str = "request_failed",
    ) -> Any:
        """
        Send one request and return the decoded JSON body.

        Args:
            method: HTTP method
            path: Path below the base URL, e.g. ``/api/auth/users``
            params: Query string parameters; empty values are dropped
            body: JSON body (dict or pydantic model)
            auth: Whether to attach the bearer token
            fallback: Message key used when the server gives no error message

        Returns:
            Decoded JSON, or None for an empty body

        Raises:
            AuthorizationError: No token available, or a 401/403 answer
            NotFoundError: 404 answer
            APIError: Any other error status or an undecodable body
            NetworkError: Connection failure or timeout
        """
        headers = {"Accept": JSON_HEADERS["Accept"]}
        data = None
        if body is not None:
            headers["Content-Type"] = JSON_HEADERS["Content-Type"]
            data = encode_body(body)

        if auth:
            token = self.token_provider() if self.token_provider else None
            if not token:
                raise AuthorizationError(translate("login_required"))
            headers.update(bearer_header(token))

        if params:
            params = {k: v for k, v in params.items() if v is not None and v != ""}

        url = f"{self.base_url}{path}"
        log_request(logger, method, path, params)
        start_time = time.time()

        try:
            response = self.http.request(
                method,
                url,
                params=params or None,
                data=data,
                headers=headers,
                timeout=self.timeout,
            )
        except requests.Timeout as e:
            log_error(logger, e, {"http_method": method, "path": path, "timeout": self.timeout})
            raise NetworkError(translate("network_timeout")) from e
        except requests.RequestException as e:
            log_error(logger, e, {"http_method": method, "path": path})
            raise NetworkError(translate("network_error")) from e

        execution_time = (time.time() - start_time) * 1000
        log_response(
            logger,
            method,
            path,
            response.status_code,
            execution_time,
            len(response.content or b""),
        )

        if response.status_code in AUTH_FAILURE_STATUSES:
            raise AuthorizationError(
                error_message_from(response, translate("not_permitted")),
                status_code=response.status_code,
            )
        if response.status_code == HTTPStatus.NOT_FOUND.value:
            raise NotFoundError(
                error_message_from(response, translate(fallback)),
                status_code=response.status_code,
            )
        if not response.ok:
            raise APIError(
                error_message_from(response, translate(fallback)),
                status_code=response.status_code,
            )

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise APIError(translate("invalid_response"), status_code=response.status_code) from e

    def _parse(self, model: Type[ModelT], payload: Any) -> ModelT:
        try:
            return model.model_validate(unwrap_data(payload))
        except PydanticValidationError as e:
            logger.warning(
                "Response failed validation",
                extra={"model": model.__name__, "validation_errors": e.errors()},
            )
            raise APIError(translate("invalid_response"), payload=payload) from e

    def _parse_list(self, model: Type[ModelT], payload: Any) -> Tuple[ModelT, ...]:
        records = unwrap_data(payload)
        if records is None:
            return ()
        if not isinstance(records, list):
            logger.warning(
                "Expected a list in response",
                extra={"model": model.__name__, "received": type(records).__name__},
            )
            raise APIError(translate("invalid_response"), payload=payload)
        return tuple(self._parse(model, record) for record in records)

    # ------------------------------------------------------------------
    # Authentication and users
    # ------------------------------------------------------------------

    def login(self, request: LoginRequest) -> LoginResponse:
        payload = self.request(
            "POST", "/api/auth/login", body=request, auth=False, fallback="login_failed"
        )
        return self._parse(LoginResponse, payload)

    def register(self, request: RegisterRequest, auth: bool = False) -> Any:
        """Create an account; admins call it authenticated to add users."""
        return self.request(
            "POST",
            "/api/auth/register",
            body=request,
            auth=auth,
            fallback="user_save_failed" if auth else "register_failed",
        )

    def me(self) -> User:
        payload = self.request("GET", "/api/auth/me", fallback="fetch_profile_failed")
        return self._parse(User, payload)

    def list_users(self) -> Tuple[User, ...]:
        payload = self.request("GET", "/api/auth/users", fallback="fetch_users_failed")
        return self._parse_list(User, payload)

    def delete_user(self, user_id: str) -> None:
        self.request("DELETE", f"/api/auth/users/{user_id}", fallback="user_delete_failed")

    def set_user_debt(self, user_id: str, request: DebtUpdateRequest) -> User:
        payload = self.request(
            "PUT",
            f"/api/auth/users/{user_id}/debt",
            body=request,
            fallback="debt_update_failed",
        )
        return self._parse(User, payload)

    # ------------------------------------------------------------------
    # Catalog
    # ------------------------------------------------------------------

    def list_categories(self) -> Tuple[Category, ...]:
        payload = self.request("GET", "/api/categories", fallback="fetch_categories_failed")
        return self._parse_list(Category, payload)

    def create_category(self, request: CategoryInput) -> Category:
        payload = self.request(
            "POST", "/api/categories", body=request, fallback="category_save_failed"
        )
        return self._parse(Category, payload)

    def delete_category(self, category_id: str) -> None:
        self.request(
            "DELETE", f"/api/categories/{category_id}", fallback="category_delete_failed"
        )

    def list_products(self, query: Optional[ProductQuery] = None) -> ProductPage:
        params = (query or ProductQuery()).to_params()
        payload = self.request(
            "GET", "/api/products", params=params, fallback="fetch_products_failed"
        )
        if not isinstance(payload, dict) or not isinstance(payload.get("data"), list):
            raise APIError(translate("invalid_response"), payload=payload)
        try:
            return ProductPage.model_validate(payload)
        except PydanticValidationError as e:
            raise APIError(translate("invalid_response"), payload=payload) from e

    def create_product(self, request: ProductInput) -> Any:
        return self.request("POST", "/api/products", body=request, fallback="product_save_failed")

    def update_product(self, product_id: str, request: ProductInput) -> Any:
        return self.request(
            "PUT", f"/api/products/{product_id}", body=request, fallback="product_save_failed"
        )

    def delete_product(self, product_id: str) -> None:
        self.request(
            "DELETE", f"/api/products/{product_id}", fallback="product_delete_failed"
        )

    # ------------------------------------------------------------------
    # Transactions and debts
    # ------------------------------------------------------------------

    def list_transactions(
        self,
        status: Optional[str] = None,
        user: Optional[str] = None,
        populate: Optional[bool] = None,
        fallback: str = "fetch_transactions_failed",
    ) -> Tuple[Transaction, ...]:
        params = {
            "status": status,
            "user": user,
            "populate": "true" if populate else None,
        }
        payload = self.request("GET", "/api/transactions", params=params, fallback=fallback)
        return self._parse_list(Transaction, payload)

    def create_transaction(self, request: TransactionCreate, fallback: str = "transaction_failed") -> Any:
        return self.request("POST", "/api/transactions", body=request, fallback=fallback)

    def update_transaction(
        self, transaction_id: str, request: TransactionUpdate, fallback: str = "mark_paid_failed"
    ) -> Any:
        return self.request(
            "PUT", f"/api/transactions/{transaction_id}", body=request, fallback=fallback
        )

    def add_user_debt(self, user_id: str, request: AddDebtRequest) -> Any:
        return self.request(
            "POST",
            f"/api/debts/users/{user_id}/debt",
            body=request,
            fallback="debt_update_failed",
        )

    def delete_user_debt(self, user_id: str) -> None:
        self.request(
            "DELETE", f"/api/debts/users/{user_id}/debt", fallback="debt_delete_failed"
        )

    def debt_history(self, user_id: str) -> Tuple[DebtHistoryEntry, ...]:
        payload = self.request(
            "GET",
            f"/api/debts/users/{user_id}/debt-history",
            fallback="fetch_history_failed",
        )
        return self._parse_list(DebtHistoryEntry, payload)

