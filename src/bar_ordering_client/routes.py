"""Customer and staff navigation paths, and the URLs encoded into QR codes."""

PUBLIC_MENU_PATH = "/carta"
TABLE_ORDER_PATH = "/pedido/{mesa}"
ORDER_CONFIRMATION_PATH = "/pedido-confirmado/{mesa}"
WAITER_PANEL_PATH = "/meseros"
STAFF_ORDERS_PATH = "/orders"
QR_GENERATOR_PATH = "/admin/qr"
LOGIN_PATH = "/login"

STAFF_PATHS = frozenset({WAITER_PANEL_PATH, STAFF_ORDERS_PATH, QR_GENERATOR_PATH})


def parse_table_number(segment: str | None) -> int | None:
    """Table number from a ``{mesa}`` path segment.

    Args:
        segment: Raw path segment, possibly missing

    Returns:
        A positive table number, or None when the view has no table context
    """
    if segment is None:
        return None

    value = segment.strip()
    if not value.isdecimal():
        return None

    number = int(value)
    return number if number > 0 else None


def table_order_path(table_number: int) -> str:
    return TABLE_ORDER_PATH.format(mesa=table_number)


def confirmation_path(table_number: int) -> str:
    return ORDER_CONFIRMATION_PATH.format(mesa=table_number)


def is_staff_path(path: str) -> bool:
    return path.rstrip("/") in STAFF_PATHS


def menu_url(public_base_url: str) -> str:
    """Absolute URL of the read-only menu."""
    return f"{public_base_url.rstrip('/')}{PUBLIC_MENU_PATH}"


def table_order_url(public_base_url: str, table_number: int) -> str:
    """Absolute URL a table's QR code points to."""
    return f"{public_base_url.rstrip('/')}{table_order_path(table_number)}"
