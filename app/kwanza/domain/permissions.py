from enum import Enum


class Role(str, Enum):
    SELLER = "SELLER"
    MANAGER = "MANAGER"
    ADMINISTRATOR = "ADMINISTRATOR"


ROLE_LABELS = {
    Role.SELLER: "Vendedor",
    Role.MANAGER: "Gerente",
    Role.ADMINISTRATOR: "Administrador",
}


class Capability(str, Enum):
    DASHBOARD = "DASHBOARD"
    SALES = "SALES"
    PRODUCT_LOOKUP = "PRODUCT_LOOKUP"
    PRODUCT_MANAGEMENT = "PRODUCT_MANAGEMENT"
    CUSTOMER_LOOKUP = "CUSTOMER_LOOKUP"
    CUSTOMER_MANAGEMENT = "CUSTOMER_MANAGEMENT"
    SUPPLIER_MANAGEMENT = "SUPPLIER_MANAGEMENT"
    STOCK_CONTROL = "STOCK_CONTROL"
    REPORTS = "REPORTS"
    USER_MANAGEMENT = "USER_MANAGEMENT"
    SYSTEM_CONFIGURATION = "SYSTEM_CONFIGURATION"


ROLE_CAPABILITIES: dict[Role, frozenset[Capability]] = {
    Role.ADMINISTRATOR: frozenset(Capability),
    Role.MANAGER: frozenset(Capability) - {Capability.USER_MANAGEMENT, Capability.SYSTEM_CONFIGURATION},
    Role.SELLER: frozenset({Capability.SALES, Capability.PRODUCT_LOOKUP, Capability.CUSTOMER_LOOKUP}),
}


def _coerce_role(role) -> Role | None:
    if isinstance(role, Role):
        return role
    try:
        return Role(role)
    except ValueError:
        return None


def capabilities_for(role) -> frozenset[Capability]:
    resolved = _coerce_role(role)
    if resolved is None:
        return frozenset()
    return ROLE_CAPABILITIES.get(resolved, frozenset())


def has_permission(role, capability: Capability) -> bool:
    return capability in capabilities_for(role)


def role_label(role) -> str:
    resolved = _coerce_role(role)
    if resolved is None:
        return "Desconhecido"
    return ROLE_LABELS[resolved]
