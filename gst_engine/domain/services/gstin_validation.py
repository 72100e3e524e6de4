# gst_engine/domain/services/gstin_validation.py

import re
from typing import Iterable

# Format only; the trailing check character is not verified.
GSTIN_REGEX = re.compile(r"^[0-9]{2}[A-Z]{5}[0-9]{4}[A-Z][1-9A-Z]Z[0-9A-Z]$")

GSTIN_LENGTH = 15

GST_STATE_CODES: dict[str, str] = {
    "01": "Jammu and Kashmir", "02": "Himachal Pradesh", "03": "Punjab",
    "04": "Chandigarh", "05": "Uttarakhand", "06": "Haryana",
    "07": "Delhi", "08": "Rajasthan", "09": "Uttar Pradesh",
    "10": "Bihar", "11": "Sikkim", "12": "Arunachal Pradesh",
    "13": "Nagaland", "14": "Manipur", "15": "Mizoram",
    "16": "Tripura", "17": "Meghalaya", "18": "Assam",
    "19": "West Bengal", "20": "Jharkhand", "21": "Odisha",
    "22": "Chhattisgarh", "23": "Madhya Pradesh", "24": "Gujarat",
    "25": "Daman and Diu", "26": "Dadra and Nagar Haveli", "27": "Maharashtra",
    "28": "Andhra Pradesh", "29": "Karnataka", "30": "Goa",
    "31": "Lakshadweep", "32": "Kerala", "33": "Tamil Nadu",
    "34": "Puducherry", "35": "Andaman and Nicobar Islands", "36": "Telangana",
    "37": "Andhra Pradesh (New)", "38": "Ladakh",
}


def validate_gstin(gstin: str | None) -> bool:
    """True if ``gstin`` has the 15-character GSTIN layout.

    No case folding or trimming is applied: ``27aaaaa0000a1z5`` is rejected.
    """
    if not gstin or len(gstin) != GSTIN_LENGTH:
        return False
    return bool(GSTIN_REGEX.match(gstin))


def get_state_code_from_gstin(gstin: str | None) -> str | None:
    """Two-digit state code of a valid GSTIN, ``None`` otherwise."""
    if not validate_gstin(gstin):
        return None
    return gstin[:2]


def get_state_name_from_gstin(gstin: str | None) -> str | None:
    code = get_state_code_from_gstin(gstin)
    if code is None:
        return None
    return GST_STATE_CODES.get(code)


def validate_gstins(gstins: Iterable[str]) -> dict[str, bool]:
    """Validate several GSTINs at once, keyed in input order."""
    return {gstin: validate_gstin(gstin) for gstin in gstins}
