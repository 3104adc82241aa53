"""
config.py

Named, overridable parameters for the statement engine, the alert rules,
the cash conversion bands and the unit cost cascade.

Every constant the calculations depend on lives here instead of being
scattered through the logic. Defaults reproduce the production dashboard;
a YAML file can override any subset:

    statements:
      tax_rate: 0.33
      days_in_year: 365
    benchmarks:
      runway_min_months: 9
"""

from dataclasses import dataclass, field, fields, asdict
from pathlib import Path
from typing import Any, Dict, Union

import yaml


@dataclass
class StatementConfig:
    """Parameters of the three-statement generator and the orchestrator."""

    # Income tax, flat rate on positive pre-tax income
    tax_rate: float = 0.35

    # Straight-line style rates applied to prior gross balances
    depreciation_rate: float = 0.10
    amortization_rate: float = 0.20

    # Escrow held for third parties = fraction of one month of gross revenue
    escrow_revenue_fraction: float = 0.40

    # Investment policy, as a share of annual OPEX
    capex_opex_ratio: float = 0.05
    software_opex_ratio: float = 0.02

    # Banker's year: daily figures are annual / 360. The cash conversion
    # analyzer uses the same value, never a hardcoded 365.
    days_in_year: int = 360

    # Working capital terms
    days_receivable: float = 30.0
    days_payable: float = 45.0

    # Absolute tolerance for every accounting identity
    tolerance: float = 1.0


@dataclass
class AlertBenchmarks:
    """Thresholds for the financial health rules."""
    runway_min_months: float = 6.0
    ltv_cac_min: float = 3.0
    churn_max: float = 0.07
    cac_max: float = 100_000.0
    negative_cash_months_max: int = 3


@dataclass
class CashConversionBands:
    """CCC banding. Below `favorable_below` is supplier-financed."""
    favorable_below: float = -5.0
    intensive_above: float = 10.0


@dataclass
class TaxRates:
    """
    Tax rates the catalog does not carry.

    The local industry tax and the payout levy are catalog items (IMP-002,
    C-VAR-05) and are read from there.
    """
    professional_withholding: float = 0.11


@dataclass
class CascadeConfig:
    """Assumptions of the unit cost cascade diagnostic."""
    default_digital_mix: float = 0.40
    minimum_viable_margin: float = 0.05
    target_margin: float = 0.15
    estimated_active_users: int = 100


@dataclass
class EngineConfig:
    """All engine parameters in one place."""
    statements: StatementConfig = field(default_factory=StatementConfig)
    benchmarks: AlertBenchmarks = field(default_factory=AlertBenchmarks)
    cash_conversion: CashConversionBands = field(default_factory=CashConversionBands)
    taxes: TaxRates = field(default_factory=TaxRates)
    cascade: CascadeConfig = field(default_factory=CascadeConfig)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'EngineConfig':
        """
        Build a config from a nested dictionary.

        Sections and keys not present keep their defaults. Unknown sections
        or keys raise ValueError so that typos never pass silently.
        """
        data = data or {}
        sections = {f.name: f for f in fields(cls)}

        unknown = set(data) - set(sections)
        if unknown:
            raise ValueError(f"Unknown config sections: {sorted(unknown)}")

        kwargs = {}
        for name, section_field in sections.items():
            section_cls = section_field.default_factory
            values = data.get(name) or {}
            allowed = {f.name for f in fields(section_cls)}
            bad_keys = set(values) - allowed
            if bad_keys:
                raise ValueError(
                    f"Unknown keys in config section '{name}': {sorted(bad_keys)}"
                )
            kwargs[name] = section_cls(**values)

        config = cls(**kwargs)
        config.validate()
        return config

    @classmethod
    def from_yaml(cls, path: Union[str, Path]) -> 'EngineConfig':
        """Load a config file; an empty file yields the defaults."""
        with open(path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f)
        if data is not None and not isinstance(data, dict):
            raise ValueError(f"Config file {path} must contain a mapping")
        return cls.from_dict(data or {})

    def to_dict(self) -> Dict[str, Dict[str, Any]]:
        return asdict(self)

    def validate(self) -> None:
        """Reject parameter values that would make the model meaningless."""
        s = self.statements
        if s.days_in_year not in (360, 365):
            raise ValueError(f"days_in_year must be 360 or 365, got {s.days_in_year}")
        if s.days_receivable < 0 or s.days_payable < 0:
            raise ValueError("Day-counts must be >= 0")
        for name in ('tax_rate', 'depreciation_rate', 'amortization_rate',
                     'escrow_revenue_fraction'):
            value = getattr(s, name)
            if not 0 <= value <= 1:
                raise ValueError(f"{name} must be between 0 and 1, got {value}")
        if s.tolerance < 0:
            raise ValueError("tolerance must be >= 0")
        if not 0 <= self.taxes.professional_withholding < 1:
            raise ValueError("professional_withholding must be in [0, 1)")
        if not 0 <= self.cascade.default_digital_mix <= 1:
            raise ValueError("default_digital_mix must be between 0 and 1")
