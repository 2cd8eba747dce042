"""Bank adapter endpoint definitions"""
from dataclasses import dataclass
from typing import Any
from urllib.parse import quote

from core.error.exceptions import ConfigurationException, InvalidInputException


@dataclass(frozen=True)
class Endpoint:
    """One backend operation"""
    method: str
    path: str

    @property
    def retry_on_timeout(self) -> bool:
        # Only idempotent reads are replayed after a timeout
        return self.method == "GET"

    def format_path(self, **path_params: Any) -> str:
        """Fill path placeholders with URL-quoted values"""
        values = {}
        for name, value in path_params.items():
            if value is None or str(value).strip() == "":
                raise InvalidInputException(f"{name} is required", name)
            values[name] = quote(str(value).strip(), safe="")
        try:
            return self.path.format(**values)
        except KeyError as e:
            raise ConfigurationException(
                f"Missing path parameter {e} for {self.path}",
                "validation"
            )


class BankAdapterEndpoints:
    """Bank adapter API endpoint definitions"""

    ENDPOINTS = {
        'member': {
            'list': Endpoint('GET', 'member/list'),
            'get': Endpoint('GET', 'member/{member_id}'),
            'get_by_phone': Endpoint('GET', 'member/phone/{phone}'),
            'balance': Endpoint('GET', 'member/{member_id}/balance'),
            'create': Endpoint('POST', 'member/create'),
            'update': Endpoint('PUT', 'member/{member_id}'),
            'delete': Endpoint('DELETE', 'member/{member_id}'),
            'check_account': Endpoint('POST', 'member/check-account'),
        },
        'reference': {
            'banks': Endpoint('GET', 'bank/lao/list'),
            'currencies': Endpoint('GET', 'currency/list'),
            'customer_groups': Endpoint('GET', 'customer-group/list'),
        },
        'credit': {
            'add': Endpoint('POST', 'member/{member_id}/add-credit'),
            'remove': Endpoint('POST', 'member/{member_id}/remove-credit'),
            'cashout': Endpoint('POST', 'member/{member_id}/cashout-credit'),
            'deposit': Endpoint('POST', 'member/deposit'),
        },
    }

    @classmethod
    def get(cls, group: str, action: str) -> Endpoint:
        """Get endpoint definition"""
        if not group or not action:
            raise ConfigurationException(
                "Group and action are required",
                "validation"
            )

        if group not in cls.ENDPOINTS:
            raise ConfigurationException(
                f"Invalid endpoint group: {group}",
                "validation"
            )
        if action not in cls.ENDPOINTS[group]:
            raise ConfigurationException(
                f"Invalid action '{action}' for group '{group}'",
                "validation"
            )

        return cls.ENDPOINTS[group][action]
