"""
Indicator catalogue.

The three World Bank indicators analysed by the pipeline, with the column
name each one takes once reshaped and the file name it is stored under.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List


@dataclass(frozen=True)
class IndicatorSpec:
    key: str
    indicator_code: str
    description: str
    value_column: str
    file_name: str

    @property
    def label(self) -> str:
        return self.description.split(" (")[0]


CO2 = IndicatorSpec(
    key="co2",
    indicator_code="EN.ATM.CO2E.PC",
    description="CO2 emissions (metric tons per capita)",
    value_column="co2_tons_per_capita",
    file_name="co2_emissions_per_capita.csv",
)

RENEWABLES = IndicatorSpec(
    key="renewables",
    indicator_code="EG.FEC.RNEW.ZS",
    description="Renewable energy consumption (% of total final energy consumption)",
    value_column="renewables_share_pct",
    file_name="renewable_energy_consumption.csv",
)

GDP = IndicatorSpec(
    key="gdp",
    indicator_code="NY.GDP.PCAP.CD",
    description="GDP per capita (current US$)",
    value_column="gdp_per_capita_usd",
    file_name="gdp_per_capita.csv",
)

INDICATORS: Dict[str, IndicatorSpec] = {spec.key: spec for spec in (CO2, RENEWABLES, GDP)}


def get_indicator(key: str) -> IndicatorSpec:
    try:
        return INDICATORS[key]
    except KeyError:
        raise KeyError(
            f"Unknown indicator {key!r}; expected one of {sorted(INDICATORS)}",
        ) from None


def list_indicators() -> List[IndicatorSpec]:
    return list(INDICATORS.values())


__all__ = [
    "IndicatorSpec",
    "CO2",
    "RENEWABLES",
    "GDP",
    "INDICATORS",
    "get_indicator",
    "list_indicators",
]
