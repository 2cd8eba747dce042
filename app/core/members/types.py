from dataclasses import asdict, dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Optional

MEMBER_FIELDS = {
    "id": "id",
    "name": "name",
    "username": "username",
    "phone": "phone",
    "bankAccountNo": "bank_account_no",
    "bankCode": "bank_code",
    "currency": "currency",
    "creditBalance": "credit_balance",
    "creditWallet": "credit_wallet",
    "agentUsername": "agent_username",
    "isBanned": "is_banned",
    "lastLoginAt": "last_login_at",
    "createdAt": "created_at",
    "updatedAt": "updated_at",
    "createdBy": "created_by",
}


def to_decimal(value: Any) -> Optional[Decimal]:
    """Parse a backend amount (number or decimal string)"""
    if value is None or value == "":
        return None
    try:
        return Decimal(str(value))
    except InvalidOperation:
        return None


@dataclass
class Member:
    """Bank adapter customer record"""
    id: str
    name: str = ""
    username: str = ""
    phone: Optional[str] = None
    bank_account_no: Optional[str] = None
    bank_code: Optional[str] = None
    currency: Optional[str] = None
    credit_balance: Optional[Decimal] = None
    credit_wallet: Optional[str] = None
    agent_username: Optional[str] = None
    is_banned: bool = False
    last_login_at: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    created_by: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Member":
        values = {}
        extra = {}
        for key, value in data.items():
            if key in MEMBER_FIELDS:
                values[MEMBER_FIELDS[key]] = value
            else:
                extra[key] = value

        values["id"] = str(values.get("id", ""))
        values["name"] = values.get("name") or ""
        values["username"] = values.get("username") or ""
        values["is_banned"] = bool(values.get("is_banned"))
        values["credit_balance"] = to_decimal(values.get("credit_balance"))
        created_by = values.get("created_by")
        if isinstance(created_by, dict):
            values["created_by"] = created_by.get("name")
        return cls(**values, extra=extra)


@dataclass
class Summary:
    """Aggregate member counters"""
    today: int = 0
    week: int = 0
    month: int = 0
    total: int = 0

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "Summary":
        data = data or {}
        return cls(
            today=int(data.get("today") or 0),
            week=int(data.get("week") or 0),
            month=int(data.get("month") or 0),
            total=int(data.get("total") or 0),
        )


@dataclass
class Pagination:
    """Server-reported pagination, trusted verbatim"""
    page: int
    limit: int
    total_items: int
    total_pages: int
    has_next_page: bool
    has_prev_page: bool

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Pagination":
        page = int(data.get("page") or 1)
        total_pages = int(data.get("totalPages") or 0)
        return cls(
            page=page,
            limit=int(data.get("limit") or 0),
            total_items=int(data.get("totalItems") or 0),
            total_pages=total_pages,
            has_next_page=bool(data.get("hasNextPage", page < total_pages)),
            has_prev_page=bool(data.get("hasPrevPage", page > 1)),
        )

    @classmethod
    def single_page(cls, page: int, limit: int, item_count: int) -> "Pagination":
        """Stand-in when the backend omits pagination metadata"""
        return cls(
            page=page,
            limit=limit,
            total_items=item_count,
            total_pages=page,
            has_next_page=False,
            has_prev_page=page > 1,
        )

    @property
    def last_page(self) -> int:
        return max(self.total_pages, 1)


@dataclass(frozen=True)
class PageQuery:
    """The (page, limit, search) tuple driving one list request"""
    page: int = 1
    limit: int = 10
    search: str = ""

    def to_params(self) -> Dict[str, Any]:
        params = {"page": self.page, "limit": self.limit}
        if self.search:
            params["search"] = self.search
        return params


@dataclass
class MemberPage:
    """One page of members with summary counters"""
    members: List[Member]
    summary: Summary
    pagination: Pagination

    @classmethod
    def from_data(cls, data: Any, query: PageQuery) -> "MemberPage":
        data = data if isinstance(data, dict) else {}
        rows = data.get("members")
        if rows is None:
            rows = data.get("rows") or []
        members = [Member.from_dict(row) for row in rows]
        if data.get("pagination"):
            pagination = Pagination.from_dict(data["pagination"])
        else:
            pagination = Pagination.single_page(query.page, query.limit, len(members))
        return cls(
            members=members,
            summary=Summary.from_dict(data.get("summary")),
            pagination=pagination,
        )


@dataclass
class Balance:
    """Freshly fetched member balance"""
    member_id: str
    balance: Decimal
    member: Optional[Member] = None

    @classmethod
    def from_data(cls, data: Dict[str, Any], member_id: str) -> "Balance":
        member = data.get("member")
        return cls(
            member_id=str(data.get("memberId") or member_id),
            balance=to_decimal(data.get("balance")) or Decimal("0"),
            member=Member.from_dict(member) if isinstance(member, dict) else None,
        )


@dataclass
class ReferenceOption:
    """Static reference entry (bank, currency)"""
    value: str
    label: str

    @classmethod
    def from_dict(cls, data: Any) -> "ReferenceOption":
        if not isinstance(data, dict):
            return cls(value=str(data), label=str(data))
        value = data.get("value", data.get("code", data.get("id", "")))
        label = data.get("label", data.get("name", value))
        return cls(value=str(value), label=str(label))

    def to_dict(self) -> Dict[str, str]:
        return asdict(self)
