from __future__ import annotations

import re

from havnesjef.services.errors import InvalidTeamNameException

DNS_LABEL_RE = re.compile(r"^[a-z0-9]([a-z0-9-]{0,61}[a-z0-9])?$")
MAX_DNS_LABEL_LEN = 63


def is_valid_dns_label(value: str) -> bool:
    return bool(DNS_LABEL_RE.fullmatch(value))


def validate_resource_name(value: str, *, kind: str = "resource") -> str:
    if not value:
        raise InvalidTeamNameException(f"{kind} name must not be empty")
    if len(value) > MAX_DNS_LABEL_LEN:
        raise InvalidTeamNameException(
            f"{kind} name {value!r} is longer than {MAX_DNS_LABEL_LEN} characters"
        )
    if not is_valid_dns_label(value):
        raise InvalidTeamNameException(
            f"{kind} name {value!r} must consist of lowercase alphanumerics or '-', "
            "and must start and end with an alphanumeric character"
        )
    return value


def service_account_group(namespace: str) -> str:
    return f"system:serviceaccounts:{namespace}"
