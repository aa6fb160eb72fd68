"""County / sales tax prompt and lenient response parser"""

import math
import re
from tfs_gateway.domain.models import TaxInfo

UNKNOWN_COUNTY = "Unknown County"

MAX_TAX_PERCENTAGE = 100.0

# Plain decimal only: no sign, exponent, underscores, inf or nan
_TAX_VALUE = re.compile(r"\d+(?:\.\d+)?|\.\d+")


def build_tax_prompt(zip_code: str) -> str:
    return (
        f"For ZIP code {zip_code} in the United States, provide ONLY the following "
        "information in this exact format:\n"
        "County: [county name]\n"
        "Tax: [sales tax percentage as a number, for example 8.25 for 8.25%, not 0.0825]\n"
        "\n"
        "Respond with only these two lines, nothing else. The tax should be the "
        "percentage value like 8.25, not the decimal 0.0825."
    )


def normalize_tax_percentage(value: float) -> float:
    """Values below 1.0 are read as fractions (0.0825 -> 8.25)"""
    return value * 100.0 if value < 1.0 else value


def parse_tax_response(text: str, zip_code: str = "") -> TaxInfo:
    """
    Parse 'County: ...' / 'Tax: ...' lines from model output.

    Prefixes match case-insensitively; a '%' sign is ignored. Missing or
    unparseable lines fall back to "Unknown County" and 0.0 instead of failing.
    Tax values outside 0-100 after normalization are treated as unparseable.
    """
    county = UNKNOWN_COUNTY
    tax_percentage = 0.0

    for raw_line in text.splitlines():
        line = raw_line.strip()
        lowered = line.lower()

        if lowered.startswith("county:"):
            value = line[len("county:"):].strip()
            if value:
                county = value
        elif lowered.startswith("tax:"):
            value = line[len("tax:"):].replace("%", "").strip()
            if not _TAX_VALUE.fullmatch(value):
                continue
            parsed = normalize_tax_percentage(float(value))
            if math.isfinite(parsed) and 0 <= parsed <= MAX_TAX_PERCENTAGE:
                tax_percentage = parsed

    return TaxInfo(county=county, sales_tax_percentage=tax_percentage, zip_code=zip_code)
