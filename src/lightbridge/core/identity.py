from __future__ import annotations

import hashlib

UUID_TEMPLATE = "xxxxxxxx-xxxx-4xxx-yxxx-xxxxxxxxxxxx"


def record_id(unique_id: str) -> str:
    """Derive the registry key for a device.

    Same layout as the HAP accessory UUID generator: the SHA-1 hex digest is
    poured into a version 4 UUID template, with the variant nibble forced to
    8-b.
    """
    digest = hashlib.sha1(unique_id.encode("utf-8")).hexdigest()
    chars: list[str] = []
    index = 0
    for placeholder in UUID_TEMPLATE:
        if placeholder == "x":
            chars.append(digest[index])
            index += 1
        elif placeholder == "y":
            chars.append(format((int(digest[index], 16) & 0x3) | 0x8, "x"))
            index += 1
        else:
            chars.append(placeholder)
    return "".join(chars)
