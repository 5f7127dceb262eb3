from flask import request

from library_ledger.errors import ValidationError

# largest value a 64-bit signed INTEGER column holds
MAX_ID = 2 ** 63 - 1


def json_object() -> dict:
    """The request body as a JSON object; an absent body reads as ``{}``."""
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def text_field(data: dict, key: str) -> str:
    value = data.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValidationError(f"{key} must be a string")
    return value.strip()


def whole_number(value, key: str, minimum: int = 0, maximum: int = MAX_ID) -> int:
    """Accept an int or a string of ASCII digits inside ``[minimum, maximum]``.

    Booleans and floats are refused even though ``int()`` would take them.
    """
    if isinstance(value, bool):
        raise ValidationError(f"{key} must be an integer")
    if isinstance(value, str):
        digits = value.strip()
        sign = ""
        if digits[:1] == "-":
            sign, digits = "-", digits[1:]
        if not (digits.isascii() and digits.isdigit()):
            raise ValidationError(f"{key} must be an integer")
        if len(digits) > 19:
            raise ValidationError(f"{key} must be between {minimum} and {maximum}")
        value = int(sign + digits)
    elif not isinstance(value, int):
        raise ValidationError(f"{key} must be an integer")

    if not minimum <= value <= maximum:
        raise ValidationError(f"{key} must be between {minimum} and {maximum}")
    return value


def id_field(data: dict, key: str) -> int:
    raw = data.get(key)
    if raw is None or raw == "":
        raise ValidationError(f"{key} is required")
    return whole_number(raw, key, minimum=1)
