from __future__ import annotations

from typing import Any

from ..core.exceptions import ValidationError


def require_float(value: Any, field_name: str) -> float:
    try:
        return float(value)
    except (TypeError, ValueError) as exc:
        raise ValidationError(f"{field_name} no es numérico") from exc


def require_latitude(value: Any, field_name: str = "latitud") -> float:
    lat = require_float(value, field_name)
    if not -90.0 <= lat <= 90.0:
        raise ValidationError(f"{field_name} fuera de rango [-90, 90]")
    return lat


def require_longitude(value: Any, field_name: str = "longitud") -> float:
    lng = require_float(value, field_name)
    if not -180.0 <= lng <= 180.0:
        raise ValidationError(f"{field_name} fuera de rango [-180, 180]")
    return lng


def require_non_negative(value: Any, field_name: str) -> float:
    number = require_float(value, field_name)
    if number < 0:
        raise ValidationError(f"{field_name} no puede ser negativo")
    return number
