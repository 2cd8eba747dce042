"""Member create / edit form"""
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional

from core.api.api_response import ApiResponse
from core.error.exceptions import (BankAdapterException,
                                   InvalidInputException)
from core.error.handler import ErrorHandler
from core.messaging.notifier import (LoggingNotifier, Notification,
                                     NotifierInterface)
from core.state.token_store import CredentialStore
from services.bank_adapter.interface import BankAdapterServiceInterface

from .types import Member, ReferenceOption

logger = logging.getLogger(__name__)

DEFAULT_CURRENCY = "LAK"
MIN_PHONE_LENGTH = 10
MIN_PASSWORD_LENGTH = 6


class FormMode(Enum):
    CREATE = "create"
    EDIT = "edit"


@dataclass
class MemberFormData:
    """Editable member fields"""
    name: str = ""
    username: str = ""
    phone: str = ""
    password: str = ""
    bank_account_no: str = ""
    bank_code: str = ""
    currency: str = DEFAULT_CURRENCY
    bcel_one_id: str = ""
    register_channel_id: str = ""

    @classmethod
    def from_member(cls, member: Member) -> "MemberFormData":
        return cls(
            name=member.name or "",
            username=member.username or "",
            phone=member.phone or "",
            password=member.extra.get("password") or "",
            bank_account_no=member.bank_account_no or "",
            bank_code=member.bank_code or "",
            currency=member.currency or DEFAULT_CURRENCY,
            bcel_one_id=member.extra.get("bcelOneId") or "",
            register_channel_id=member.extra.get("registerChannelId") or "",
        )

    def validate(self) -> Dict[str, str]:
        """Field errors keyed by field name, empty when valid"""
        errors = {}
        if not self.name.strip():
            errors["name"] = "Please enter a name"
        if not self.username.strip():
            errors["username"] = "Please enter a username"
        if len(self.phone.strip()) < MIN_PHONE_LENGTH:
            errors["phone"] = "Please enter a valid phone number"
        if len(self.password) < MIN_PASSWORD_LENGTH:
            errors["password"] = f"Password must be at least {MIN_PASSWORD_LENGTH} characters"
        if not self.bank_account_no.strip():
            errors["bank_account_no"] = "Please enter a bank account number"
        if not self.bank_code.strip():
            errors["bank_code"] = "Please select a bank"
        if not self.currency.strip():
            errors["currency"] = "Please select a currency"
        return errors

    def to_payload(self) -> Dict[str, Any]:
        """Fields under the backend's names, optional blanks dropped"""
        payload = {
            "name": self.name.strip(),
            "username": self.username.strip(),
            "phone": self.phone.strip(),
            "password": self.password,
            "bankAccountNo": self.bank_account_no.strip(),
            "bankCode": self.bank_code.strip(),
            "currency": self.currency.strip(),
        }
        if self.bcel_one_id.strip():
            payload["bcelOneId"] = self.bcel_one_id.strip()
        if self.register_channel_id.strip():
            payload["registerChannelId"] = self.register_channel_id.strip()
        return payload


class MemberForm:
    """Create or edit one member"""

    def __init__(
        self,
        service: BankAdapterServiceInterface,
        credentials: CredentialStore,
        member: Optional[Member] = None,
        notifier: Optional[NotifierInterface] = None
    ):
        self.service = service
        self.credentials = credentials
        self.member = member
        self.mode = FormMode.EDIT if member else FormMode.CREATE
        self.data = MemberFormData.from_member(member) if member else MemberFormData()
        self.notifier = notifier or LoggingNotifier()

        self.banks: List[ReferenceOption] = []
        self.currencies: List[ReferenceOption] = []
        self.customer_groups: List[Dict[str, Any]] = []
        self._reference_loaded = False

    def load_reference_data(self) -> bool:
        """Fetch banks, currencies and customer groups once per form"""
        if self._reference_loaded:
            return True
        try:
            self.banks = self.service.list_banks()
            self.currencies = self.service.list_currencies()
            self.customer_groups = self.service.list_customer_groups()
        except BankAdapterException as e:
            self.notifier.notify(ErrorHandler.to_notification(e, "Load form data"))
            return False
        self._reference_loaded = True
        return True

    def verify_account(self) -> bool:
        """Check the bank account and fill the name with the holder's name"""
        checks = (
            (self.data.bank_code, "bank_code", "Please select a bank first"),
            (self.data.bank_account_no, "bank_account_no", "Please enter an account number first"),
            (self.data.username, "username", "Please enter a phone number first"),
        )
        for value, field, message in checks:
            if not value.strip():
                self.notifier.notify(ErrorHandler.to_notification(InvalidInputException(message, field)))
                return False

        try:
            response = self.service.check_account(
                bank_account_number=self.data.bank_account_no.strip(),
                bank_name=self.data.bank_code.strip(),
                bank_type=self.data.currency.strip(),
                phone=self.data.username.strip(),
            )
        except BankAdapterException as e:
            self.notifier.notify(ErrorHandler.to_notification(e, "Verify account"))
            return False

        if not response.success:
            self.notifier.notify(Notification.error(response.message or "Cannot verify account"))
            return False

        if response.message:
            self.data.name = response.message
        self.notifier.notify(Notification.success("Account verified"))
        return True

    def submit(self) -> Optional[ApiResponse]:
        """Validate and send the create / update request

        Returns:
            ApiResponse on success, None when blocked or rejected
        """
        errors = self.data.validate()
        if errors:
            field, message = next(iter(errors.items()))
            self.notifier.notify(ErrorHandler.to_notification(InvalidInputException(message, field)))
            return None

        action = "Create member" if self.mode is FormMode.CREATE else "Update member"
        try:
            self.credentials.require(action)
            if self.mode is FormMode.CREATE:
                response = self.service.create_member(self.data.to_payload())
            else:
                response = self.service.update_member(self.member.id, self.data.to_payload())
            response.raise_for_failure()
        except BankAdapterException as e:
            self.notifier.notify(ErrorHandler.to_notification(e, action))
            return None

        self.notifier.notify(Notification.success(
            "Member created" if self.mode is FormMode.CREATE else "Member updated"
        ))
        return response
