"""Region id derivation from free-text addresses (e.g. "서울특별시 강남구 ...")."""


def extract_region_from_address(address: str | None) -> str | None:
    """
    First two whitespace-delimited tokens of the address joined by a single space,
    e.g. "대구광역시 수성구 범어동 1" -> "대구광역시 수성구". None if fewer than two tokens.
    """
    if not address:
        return None
    parts = address.split()
    if len(parts) < 2:
        return None
    return f"{parts[0]} {parts[1]}"
