from __future__ import annotations

from typing import Any

ATTENDANCE_QR_PAYLOADS = ("mess-management://attendance", "mess://attendance")


def validate_qr_code(qr_data: Any) -> bool:
    """Accept the app deep link, the legacy scheme, or a web URL ending in the mobile attendance path."""

    if not qr_data or not isinstance(qr_data, str):
        return False
    trimmed = qr_data.strip()
    return trimmed in ATTENDANCE_QR_PAYLOADS or "/attendance/mobile" in trimmed
