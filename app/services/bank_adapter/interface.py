from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Any, Dict, List, Optional, Union

from core.api.api_response import ApiResponse
from core.members.types import Balance, Member, MemberPage, ReferenceOption

Amount = Union[Decimal, float, int, str]


class BankAdapterServiceInterface(ABC):
    """Interface defining bank adapter member operations"""

    @abstractmethod
    def list_members(self, page: int = 1, limit: int = 10, search: str = "") -> MemberPage:
        """Fetch one page of members

        Args:
            page: Page number, 1-based
            limit: Page size
            search: Free-text filter applied by the backend

        Returns:
            MemberPage: Rows, summary counters and server pagination
        """
        pass

    @abstractmethod
    def get_member(self, member_id: str) -> Member:
        """Fetch a member by id

        Raises:
            NotFoundException: If the member does not exist
        """
        pass

    @abstractmethod
    def get_member_by_phone(self, phone: str) -> Member:
        """Fetch a member by phone

        Raises:
            NotFoundException: If no member has this phone
        """
        pass

    @abstractmethod
    def get_balance(self, member_id: str) -> Balance:
        """Fetch a member's balance, never cached"""
        pass

    @abstractmethod
    def create_member(self, data: Dict[str, Any]) -> ApiResponse:
        """Create a member

        Args:
            data: Member fields using the backend's names (name, username,
                phone, bankAccountNo, bankCode, currency, ...)

        Returns:
            ApiResponse: Backend envelope, `success: false` on rejection
        """
        pass

    @abstractmethod
    def update_member(self, member_id: str, data: Dict[str, Any]) -> ApiResponse:
        """Update a member's fields"""
        pass

    @abstractmethod
    def delete_member(self, member_id: str) -> ApiResponse:
        """Delete a member"""
        pass

    @abstractmethod
    def list_banks(self) -> List[ReferenceOption]:
        """Static list of banks"""
        pass

    @abstractmethod
    def list_currencies(self) -> List[ReferenceOption]:
        """Static list of currencies"""
        pass

    @abstractmethod
    def list_customer_groups(self) -> List[Dict[str, Any]]:
        """Static list of customer groups"""
        pass

    @abstractmethod
    def check_account(
        self,
        bank_account_number: str,
        bank_name: str,
        bank_type: str,
        phone: str
    ) -> ApiResponse:
        """Verify a bank account without side effects

        Returns:
            ApiResponse: On success `message` holds the resolved account
            holder name
        """
        pass

    @abstractmethod
    def add_credit(
        self,
        member_id: str,
        phone: str,
        amount: Amount,
        remarks: Optional[str] = None
    ) -> ApiResponse:
        """Add credit to a member"""
        pass

    @abstractmethod
    def remove_credit(
        self,
        member_id: str,
        amount: Amount,
        remarks: Optional[str] = None
    ) -> ApiResponse:
        """Remove credit from a member"""
        pass

    @abstractmethod
    def cashout_credit(self, member_id: str, remarks: Optional[str] = None) -> ApiResponse:
        """Cash out (zero) all of a member's credit"""
        pass

    @abstractmethod
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
        """Record a deposit made at the given date and time

        Args:
            phone: Member phone
            amount: Deposited amount
            currency: Currency code
            bank_name: Bank the deposit went through
            date_deposit: Date as YYYY-MM-DD
            time_deposit: Time as HH:MM or HH:MM:SS, local time
            member_id: Optional member id
        """
        pass
