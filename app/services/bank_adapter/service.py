"""Bank adapter service: typed wrappers over the member REST API"""
import logging
from datetime import tzinfo
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Optional

import requests

from core.api.api_response import ApiResponse
from core.api.base import make_api_request
from core.api.config import APIConfig
from core.error.exceptions import InvalidInputException, NotFoundException
from core.members.credit import combine_deposit_datetime, to_iso_utc
from core.members.types import (Balance, Member, MemberPage, PageQuery,
                                ReferenceOption)
from core.state.token_store import CredentialStore

from .config import BankAdapterEndpoints
from .interface import Amount, BankAdapterServiceInterface

logger = logging.getLogger(__name__)

CREATE_REQUIRED_FIELDS = ("name", "username", "phone", "bankAccountNo", "bankCode", "currency")


def require_fields(data: Dict[str, Any], fields) -> None:
    """Check required keys are present and non-empty"""
    for name in fields:
        value = data.get(name)
        if value is None or (isinstance(value, str) and not value.strip()):
            raise InvalidInputException(f"{name} is required", name)


def parse_amount(value: Amount, field: str = "amount") -> float:
    """Parse an amount for the JSON body"""
    if value is None or (isinstance(value, str) and not value.strip()):
        raise InvalidInputException(f"{field} is required", field)
    try:
        amount = Decimal(str(value).strip())
    except InvalidOperation:
        raise InvalidInputException(f"Invalid {field}: {value!r}", field)
    if not amount.is_finite():
        raise InvalidInputException(f"Invalid {field}: {value!r}", field)
    return float(amount)


class BankAdapterService(BankAdapterServiceInterface):
    """Bank adapter API client bound to one credential store"""

    def __init__(
        self,
        credentials: CredentialStore,
        config: Optional[APIConfig] = None,
        session: Optional[requests.Session] = None,
        tz: Optional[tzinfo] = None
    ):
        self.credentials = credentials
        self.config = config or APIConfig.from_settings()
        self.session = session or requests.Session()
        # Zone deposit date/time fields are entered in, local when None
        self.tz = tz

    def _request(
        self,
        group: str,
        action: str,
        path_params: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None,
        payload: Optional[Dict[str, Any]] = None
    ) -> ApiResponse:
        """Resolve the endpoint, gate on the token and send"""
        endpoint = BankAdapterEndpoints.get(group, action)
        path = endpoint.format_path(**(path_params or {}))
        token = self.credentials.require(f"{group}.{action}")

        return make_api_request(
            self.session,
            self.config,
            endpoint.method,
            path,
            token=token,
            params=params,
            payload=payload,
            retry_on_timeout=endpoint.retry_on_timeout
        )

    def list_members(self, page: int = 1, limit: int = 10, search: str = "") -> MemberPage:
        query = PageQuery(page=page, limit=limit, search=search or "")
        response = self._request("member", "list", params=query.to_params())
        response.raise_for_failure("GET", "member/list")
        return MemberPage.from_data(response.data, query)

    def _get_single(self, action: str, path_params: Dict[str, Any]) -> Member:
        response = self._request("member", action, path_params=path_params)
        data = response.data if isinstance(response.data, dict) else {}
        record = data.get("member", data)
        if not response.success or not isinstance(record, dict) or not record:
            path = BankAdapterEndpoints.get("member", action).path
            raise NotFoundException(
                response.message or "Member not found",
                method="GET",
                path=path,
                status_code=response.http_status,
                response=response.to_dict()
            )
        return Member.from_dict(record)

    def get_member(self, member_id: str) -> Member:
        return self._get_single("get", {"member_id": member_id})

    def get_member_by_phone(self, phone: str) -> Member:
        return self._get_single("get_by_phone", {"phone": phone})

    def get_balance(self, member_id: str) -> Balance:
        response = self._request("member", "balance", path_params={"member_id": member_id})
        response.raise_for_failure("GET", "member/balance")
        data = response.data if isinstance(response.data, dict) else {"balance": response.data}
        return Balance.from_data(data, member_id)

    def create_member(self, data: Dict[str, Any]) -> ApiResponse:
        payload = {k: v for k, v in (data or {}).items() if v is not None}
        require_fields(payload, CREATE_REQUIRED_FIELDS)
        logger.info(f"Creating member {payload.get('username')}")
        return self._request("member", "create", payload=payload)

    def update_member(self, member_id: str, data: Dict[str, Any]) -> ApiResponse:
        payload = {k: v for k, v in (data or {}).items() if v is not None}
        payload["id"] = member_id
        logger.info(f"Updating member {member_id}")
        return self._request("member", "update", path_params={"member_id": member_id}, payload=payload)

    def delete_member(self, member_id: str) -> ApiResponse:
        logger.info(f"Deleting member {member_id}")
        return self._request("member", "delete", path_params={"member_id": member_id})

    def _reference(self, action: str) -> List[Any]:
        response = self._request("reference", action)
        response.raise_for_failure("GET", BankAdapterEndpoints.get("reference", action).path)
        data = response.data
        if isinstance(data, dict):
            # Some lists arrive keyed by their own name
            data = next((v for v in data.values() if isinstance(v, list)), [])
        return list(data or [])

    def list_banks(self) -> List[ReferenceOption]:
        return [ReferenceOption.from_dict(item) for item in self._reference("banks")]

    def list_currencies(self) -> List[ReferenceOption]:
        return [ReferenceOption.from_dict(item) for item in self._reference("currencies")]

    def list_customer_groups(self) -> List[Dict[str, Any]]:
        return self._reference("customer_groups")

    def check_account(
        self,
        bank_account_number: str,
        bank_name: str,
        bank_type: str,
        phone: str
    ) -> ApiResponse:
        payload = {
            "bankAccountNumber": bank_account_number,
            "bankName": bank_name,
            "bankType": bank_type,
            "phone": phone,
        }
        require_fields(payload, ("bankAccountNumber", "bankName", "phone"))
        return self._request("member", "check_account", payload=payload)

    def add_credit(
        self,
        member_id: str,
        phone: str,
        amount: Amount,
        remarks: Optional[str] = None
    ) -> ApiResponse:
        payload = {"phone": phone, "amount": parse_amount(amount), "remarks": remarks or ""}
        require_fields(payload, ("phone",))
        logger.info(f"Adding credit to member {member_id}")
        return self._request("credit", "add", path_params={"member_id": member_id}, payload=payload)

    def remove_credit(
        self,
        member_id: str,
        amount: Amount,
        remarks: Optional[str] = None
    ) -> ApiResponse:
        payload = {"amount": parse_amount(amount), "remarks": remarks or ""}
        logger.info(f"Removing credit from member {member_id}")
        return self._request("credit", "remove", path_params={"member_id": member_id}, payload=payload)

    def cashout_credit(self, member_id: str, remarks: Optional[str] = None) -> ApiResponse:
        logger.info(f"Cashing out credit for member {member_id}")
        return self._request(
            "credit", "cashout",
            path_params={"member_id": member_id},
            payload={"remarks": remarks or ""}
        )

    def deposit(
        self,
        phone: str,
        amount: Amount,
        currency: str,
        bank_name: str,
        date_deposit: str,
        time_deposit: str,
        member_id: Optional[str] = None
    ) -> ApiResponse:
        actual = combine_deposit_datetime(date_deposit, time_deposit, self.tz)
        payload = {
            "phone": phone,
            "amount": parse_amount(amount),
            "currency": currency,
            "bankName": bank_name,
            "dateDeposit": date_deposit,
            "timeDeposit": time_deposit,
            "actualDateTime": to_iso_utc(actual),
        }
        require_fields(payload, ("phone", "currency", "bankName"))
        if member_id:
            payload["id"] = member_id
        logger.info(f"Recording deposit for {phone} at {payload['actualDateTime']}")
        return self._request("credit", "deposit", payload=payload)
