import re
from typing import Any, Optional, Tuple

NOT_SPECIFIED = "Not specified"

NUMBER_RE = re.compile(r'\d+(?:[.,]\d+)*(?:\s*[kK]\b)?')


def _to_number(token: str) -> Optional[float]:
    token = token.strip()
    multiplier = 1
    if token[-1:] in ("k", "K"):
        multiplier = 1000
        token = token[:-1].strip()
    # "100,000" and "100.000" are thousands separators, "85.5" is a decimal
    if re.fullmatch(r'\d{1,3}(?:[.,]\d{3})+', token):
        token = re.sub(r'[.,]', "", token)
    else:
        token = token.replace(",", "")
    try:
        return float(token) * multiplier
    except ValueError:
        return None


def coerce_amount(value: Any) -> Optional[float]:
    """
    Numeric salary amount from whatever the upstream sent (int, float, numeric
    string). Negative, NaN and unparseable values become None.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        match = NUMBER_RE.search(str(value))
        if not match:
            return None
        number = _to_number(match.group(0))
    if number is None or number != number or number < 0:
        return None
    return number


def parse_salary_range(text: Optional[str]) -> Tuple[Optional[float], Optional[float]]:
    """
    Parse a display string such as "100000-150000", "$80k - $95k" or
    "Not specified" into (min, max). A single figure yields (n, None).
    """
    if not text or text.strip().lower() == NOT_SPECIFIED.lower():
        return None, None

    numbers = [_to_number(m.group(0)) for m in NUMBER_RE.finditer(text)]
    numbers = [n for n in numbers if n is not None]
    if not numbers:
        return None, None
    if len(numbers) == 1:
        return numbers[0], None

    low, high = numbers[0], numbers[1]
    if high < low:
        low, high = high, low
    return low, high


def _fmt(amount: float) -> str:
    return str(int(amount)) if float(amount).is_integer() else f"{amount:g}"


def format_salary(salary_min: Optional[float], salary_max: Optional[float]) -> str:
    if salary_min is None:
        return NOT_SPECIFIED
    if salary_max is None:
        return _fmt(salary_min)
    return f"{_fmt(salary_min)}-{_fmt(salary_max)}"
