"""
Calculator inputs: option enums and the validated CalculationInput value object.
"""

import math
from dataclasses import dataclass, fields
from enum import Enum
from typing import Any, Dict, Mapping, Union


class InputValidationError(ValueError):
    """Raised when a calculator input is missing, non-positive or unrecognized."""

    def __init__(self, field: str, message: str):
        super().__init__(f"{field}: {message}")
        self.field = field


class RateTier(str, Enum):
    SMALL_GENERAL = 'Small General Service'
    MEDIUM_GENERAL = 'Medium General Service'
    LARGE_GENERAL = 'Large General Service'
    TRANSMISSION = 'Transmission Service'


class InstallationType(str, Enum):
    ROOF_MOUNT = 'Roof-Mount'
    GROUND_MOUNT = 'Ground-Mount'
    CARPORT = 'Carport/Canopy'
    TRACKER = 'Tracker System'


class PanelQuality(str, Enum):
    STANDARD = 'Standard Efficiency'
    HIGH_EFFICIENCY = 'High Efficiency'
    PREMIUM_TIER_1 = 'Premium Tier 1'


class BatteryStorage(str, Enum):
    NONE = 'No Battery'
    BATTERY_50_KWH = '50kWh Commercial Battery'
    BATTERY_100_KWH = '100kWh Commercial Battery'
    BATTERY_CUSTOM_200_KWH_PLUS = '200kWh+ Custom Solution'


def _compact(name: str) -> str:
    return name.replace('_', '').upper()


def _parse_option(enum_cls, value, field: str):
    """Resolve an enum member from a member, its label or its name."""
    if isinstance(value, enum_cls):
        return value
    if value is None or value == '':
        raise InputValidationError(field, "a value must be selected")
    if isinstance(value, str):
        for member in enum_cls:
            if value == member.value or _compact(value) == _compact(member.name):
                return member
    raise InputValidationError(field, f"unrecognized option {value!r}")


def _parse_positive(value, field: str) -> float:
    if value is None:
        raise InputValidationError(field, "is required")
    if isinstance(value, bool):
        raise InputValidationError(field, "must be a number")
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise InputValidationError(field, f"must be a number, got {value!r}")
    if not math.isfinite(number) or number <= 0:
        raise InputValidationError(field, "must be a finite positive number")
    return number


@dataclass(frozen=True)
class CalculationInput:
    """
    Validated parameters for one commercial solar estimate.

    Numeric fields must be strictly positive. Installation type, panel
    quality and battery storage must be recognized options. The rate tier
    is required but an unrecognized tier is kept as given and priced at
    the Medium General Service rate. The location is free-form.
    """
    system_size_kw: float
    monthly_usage_kwh: float
    current_monthly_bill_cad: float
    rate_tier: Union[RateTier, str]
    installation_type: InstallationType
    panel_quality: PanelQuality
    battery_storage: BatteryStorage
    location_region: str = ''

    def __post_init__(self):
        # Frozen dataclass, so normalized values go through object.__setattr__
        for name in ('system_size_kw', 'monthly_usage_kwh', 'current_monthly_bill_cad'):
            object.__setattr__(self, name, _parse_positive(getattr(self, name), name))

        if not self.rate_tier:
            raise InputValidationError('rate_tier', "a value must be selected")
        try:
            tier = _parse_option(RateTier, self.rate_tier, 'rate_tier')
        except InputValidationError:
            tier = str(self.rate_tier)
        object.__setattr__(self, 'rate_tier', tier)

        object.__setattr__(self, 'installation_type', _parse_option(
            InstallationType, self.installation_type, 'installation_type'))
        object.__setattr__(self, 'panel_quality', _parse_option(
            PanelQuality, self.panel_quality, 'panel_quality'))
        object.__setattr__(self, 'battery_storage', _parse_option(
            BatteryStorage, self.battery_storage, 'battery_storage'))

        object.__setattr__(self, 'location_region', str(self.location_region or ''))

    @property
    def rate_tier_label(self) -> str:
        """Rate tier as a plain label, whether or not it is a known tier."""
        if isinstance(self.rate_tier, RateTier):
            return self.rate_tier.value
        return self.rate_tier

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'CalculationInput':
        """
        Build an input from a plain mapping, such as submitted form values.

        Raises:
            InputValidationError: if a required key is missing or a value is invalid
        """
        kwargs = {}
        for f in fields(cls):
            if f.name in data:
                kwargs[f.name] = data[f.name]
            elif f.name != 'location_region':
                raise InputValidationError(f.name, "is required")
        return cls(**kwargs)

    def to_dict(self) -> Dict[str, Any]:
        """Field values with enums replaced by their labels."""
        return {
            'system_size_kw': self.system_size_kw,
            'monthly_usage_kwh': self.monthly_usage_kwh,
            'current_monthly_bill_cad': self.current_monthly_bill_cad,
            'rate_tier': self.rate_tier_label,
            'installation_type': self.installation_type.value,
            'panel_quality': self.panel_quality.value,
            'battery_storage': self.battery_storage.value,
            'location_region': self.location_region,
        }
