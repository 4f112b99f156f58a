from __future__ import annotations

import json
from collections.abc import Mapping
from pathlib import Path
from typing import Annotated, Any, Literal, cast

import yaml
from pydantic import (
    AliasChoices,
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    NonNegativeInt,
    PlainSerializer,
    PositiveInt,
    ValidationError,
    model_validator,
)

from errors import ConfigValidationError
from money import Money, to_literal

output_dir = "output/"

MoneyValue = Annotated[
    Money,
    BeforeValidator(Money.parse),
    PlainSerializer(to_literal, return_type=str, when_used="always"),
]


class BaseConfigModel(BaseModel):
    model_config = ConfigDict(validate_default=True, frozen=True, arbitrary_types_allowed=True)

    @model_validator(mode="before")
    @classmethod
    def _merge_config_values(cls, data: Any) -> Any:
        """Let a bare number (or a partial mapping) override just part of a tunable."""
        if not isinstance(data, Mapping):
            return data
        merged = dict(data)
        for field_name, field in cls.model_fields.items():
            default = field.default
            if not isinstance(default, ConfigValue) or field_name not in merged:
                continue
            provided = merged[field_name]
            if isinstance(provided, ConfigValue):
                continue
            base = default.model_dump()
            if isinstance(provided, Mapping):
                base.update(provided)
            else:
                base["value"] = provided
            merged[field_name] = base
        return merged


class ConfigValue(BaseConfigModel):
    """A named tunable with an optional inclusive range."""

    value: float
    name: str
    description: str | None = None
    range: tuple[float, float] | None = None

    @model_validator(mode="after")
    def _check_range(self) -> "ConfigValue":
        if self.range is None:
            return self
        low, high = self.range
        if low > high:
            raise ValueError(f"range minimum {low} exceeds maximum {high}")
        if not low <= self.value <= high:
            raise ValueError(f"value {self.value} outside range [{low}, {high}]")
        return self


class IntConfigValue(ConfigValue):
    value: int
    range: tuple[int, int] | None = None


class MoneyConfigValue(ConfigValue):
    value: MoneyValue
    range: tuple[MoneyValue, MoneyValue] | None = None


class GameConfig(BaseConfigModel):
    speed: ConfigValue = ConfigValue(
        value=1.0,
        name="Seconds per day",
        description="Real seconds that make up one simulated day. 0 pauses the simulation.",
        range=(0.0, 10.0),
    )


class InitPeopleConfig(BaseConfigModel):
    poor: IntConfigValue = IntConfigValue(
        value=100, name="Poor people", description="Number of poor people at start.", range=(0, 10_000)
    )
    rich: IntConfigValue = IntConfigValue(
        value=10, name="Rich people", description="Number of rich people at start.", range=(0, 1_000)
    )
    poor_starting_money: MoneyConfigValue = MoneyConfigValue(
        value="1kCr", name="Poor starting money", description="Money each poor person starts with."
    )
    rich_starting_money: MoneyConfigValue = MoneyConfigValue(
        value="100kCr", name="Rich starting money", description="Money each rich person starts with."
    )


class BusinessTemplate(BaseConfigModel):
    name: str
    production_cycle: str
    money: MoneyValue
    workers: NonNegativeInt = 1
    copies: PositiveInt = 1


def _default_business_templates() -> list[BusinessTemplate]:
    return [
        BusinessTemplate(name="Farm", production_cycle="farming", money="5kCr", workers=4, copies=3),
        BusinessTemplate(name="Lumberjack Hut", production_cycle="logging", money="2kCr", workers=2),
        BusinessTemplate(name="Carpentry", production_cycle="carpentry", money="5kCr", workers=2, copies=2),
    ]


class InitConfig(BaseConfigModel):
    people: InitPeopleConfig = Field(default_factory=InitPeopleConfig)
    businesses: list[BusinessTemplate] = Field(default_factory=_default_business_templates)


class NeedConfig(BaseConfigModel):
    good: str
    base_utility: MoneyValue
    consumption_interval_days: PositiveInt = 1


def _default_needs() -> list[NeedConfig]:
    return [
        NeedConfig(good="food", base_utility="25Cr", consumption_interval_days=1),
        NeedConfig(good="furniture", base_utility="300Cr", consumption_interval_days=30),
    ]


class PeopleConfig(BaseConfigModel):
    max_buy_orders_per_day: IntConfigValue = IntConfigValue(
        value=3,
        name="Max buy orders per day",
        description="How many new buy orders a person may place in a single day.",
        range=(1, 50),
    )
    discount_rate: ConfigValue = ConfigValue(
        value=0.9,
        name="Discount rate",
        description="Fraction of utility a person still assigns to a benefit one month (30 days) away.",
        range=(0.0, 1.0),
    )
    needs: list[NeedConfig] = Field(default_factory=_default_needs)


class ProductionCycleConfig(BaseConfigModel):
    name: str
    inputs: dict[str, PositiveInt] = Field(default_factory=dict)
    output_good: str
    output_units: PositiveInt
    workdays_needed: PositiveInt = 1
    initial_price: MoneyValue


def _default_production_cycles() -> list[ProductionCycleConfig]:
    return [
        ProductionCycleConfig(name="farming", output_good="food", output_units=10, initial_price="8Cr"),
        ProductionCycleConfig(name="logging", output_good="wood", output_units=4, initial_price="5Cr"),
        ProductionCycleConfig(
            name="carpentry",
            inputs={"wood": 2},
            output_good="furniture",
            output_units=1,
            initial_price="60Cr",
        ),
    ]


class BusinessPricesConfig(BaseConfigModel):
    max_change_per_day: ConfigValue = ConfigValue(
        value=0.05,
        name="Max price change per day",
        description="Largest relative price change a business may make in one day.",
        range=(0.0, 1.0),
    )
    sell_history_to_consider: IntConfigValue = IntConfigValue(
        value=7,
        name="Sell history to consider",
        description="Days of executed sales compared against outstanding supply to detect extreme demand.",
        range=(1, 365),
    )


class BusinessMarketConfig(BaseConfigModel):
    amount_of_sell_orders_seen: ConfigValue = ConfigValue(
        value=0.5,
        name="Sell orders seen",
        description="Fraction of all live sell orders a buyer gets to see.",
        range=(0.0, 1.0),
    )
    amount_of_sell_orders_to_choose_best_price_from: ConfigValue = ConfigValue(
        value=0.1,
        name="Buyer irrationality",
        description="Fraction of the cheapest visible sell orders a buyer picks from at random. "
        "0 always takes the cheapest, 1 picks among all visible orders.",
        range=(0.0, 1.0),
    )
    order_expiration_time: IntConfigValue = IntConfigValue(
        value=5,
        name="Order expiration time",
        description="Days an order stays on the market before it expires.",
        range=(1, 365),
    )


class BusinessConfig(BaseConfigModel):
    prices: BusinessPricesConfig = Field(default_factory=BusinessPricesConfig)
    market: BusinessMarketConfig = Field(default_factory=BusinessMarketConfig)
    goal_produced_cycles_count: IntConfigValue = IntConfigValue(
        value=5,
        name="Goal produced cycles",
        description="Cycles of unsold output above which a business shrinks its staff.",
        range=(1, 100),
    )
    keep_resources_for_cycles_amount: IntConfigValue = IntConfigValue(
        value=3,
        name="Keep resources for cycles",
        description="Cycles of stock (inputs and output) a business tries to keep on hand.",
        range=(1, 100),
    )
    min_days_between_staff_change: IntConfigValue = IntConfigValue(
        value=5,
        name="Min days between staff change",
        description="Cooldown between two hires or fires (insolvency firing ignores it).",
        range=(0, 365),
    )
    money_to_create_business: MoneyConfigValue = MoneyConfigValue(
        value="20kCr",
        name="Money to create business",
        description="Capital a person moves into a newly created business.",
    )
    monthly_dividend: ConfigValue = ConfigValue(
        value=0.5,
        name="Monthly dividend",
        description="Share of monthly after-tax profit paid out to the owner.",
        range=(0.0, 1.0),
    )
    new_worker_salary: MoneyConfigValue = MoneyConfigValue(
        value="40Cr",
        name="New worker salary",
        description="Daily salary offered to newly hired workers.",
        range=("1Cr", "10kCr"),
    )
    bankruptcy_resolution: Literal["freeze", "liquidate"] = "freeze"
    production_cycles: list[ProductionCycleConfig] = Field(default_factory=_default_production_cycles)


class GovernmentConfig(BaseConfigModel):
    min_time_between_business_creation: IntConfigValue = IntConfigValue(
        value=30,
        name="Min time between business creation",
        description="Days that must pass between two business creations.",
        range=(1, 365),
    )
    cit: ConfigValue = ConfigValue(
        value=0.19,
        name="CIT",
        description="Corporate income tax rate on monthly business profit.",
        range=(0.0, 1.0),
    )
    pit: ConfigValue = ConfigValue(
        value=0.1,
        name="PIT",
        description="Personal income tax rate. Not implemented, kept for completeness.",
        range=(0.0, 1.0),
    )


class SimulationConfig(BaseConfigModel):
    game: GameConfig = Field(default_factory=GameConfig)
    init: InitConfig = Field(default_factory=InitConfig)
    people: PeopleConfig = Field(default_factory=PeopleConfig)
    business: BusinessConfig = Field(default_factory=BusinessConfig)
    government: GovernmentConfig = Field(
        default_factory=GovernmentConfig,
        validation_alias=AliasChoices("government", "goverment"),
    )
    seed: int = 42
    simulation_days: PositiveInt = 365
    check_invariants: bool = True
    ledger_journal_size: PositiveInt = 1_000
    trade_history_size: PositiveInt = 1_000
    price_history_days: PositiveInt = 365
    logging_level: str = "INFO"
    log_file: str = output_dir + "simulation.log"
    log_format: str = "%(asctime)s - %(levelname)s - %(message)s"
    summary_file: str = output_dir + "simulation_summary.json"
    json_indent: PositiveInt = 4
    metrics_export_path: str = output_dir + "metrics"
    GOVERNMENT_ID: str = "government"
    PERSON_ID_PREFIX: str = "person_"
    BUSINESS_ID_PREFIX: str = "business_"

    @model_validator(mode="after")
    def _check_references(self) -> "SimulationConfig":
        cycles = {cycle.name for cycle in self.business.production_cycles}
        missing = sorted({t.production_cycle for t in self.init.businesses} - cycles)
        if missing:
            raise ValueError(f"business templates reference unknown production cycles: {', '.join(missing)}")
        produced = {cycle.output_good for cycle in self.business.production_cycles}
        unproducible = sorted({need.good for need in self.people.needs} - produced)
        if unproducible:
            raise ValueError(f"needs reference goods no production cycle makes: {', '.join(unproducible)}")
        return self

    @property
    def production_cycles_by_name(self) -> dict[str, ProductionCycleConfig]:
        return {cycle.name: cycle for cycle in self.business.production_cycles}

    def override(self, values: Mapping[str, object]) -> SimulationConfig:
        """
        Return a validated copy with some entries replaced.

        Keys are dotted paths (``"business.prices.max_change_per_day"``). For
        ranged tunables a bare value replaces only the ``value`` part.
        """
        data = self.model_dump(mode="json", by_alias=False)
        for dotted_key, new_value in values.items():
            *parents, leaf = dotted_key.split(".")
            node = data
            for part in parents:
                node = node[part]
            current = node.get(leaf)
            if isinstance(current, dict) and "value" in current and not isinstance(new_value, Mapping):
                current["value"] = new_value
            else:
                node[leaf] = new_value
        return load_simulation_config(data)


def _format_location(location: tuple[int | str, ...]) -> str:
    return ".".join(str(part) for part in location) or "<root>"


def load_simulation_config(data: Mapping[str, Any] | None = None) -> SimulationConfig:
    """
    Validate a nested mapping into a SimulationConfig.

    Raises:
        ConfigValidationError: Listing every entry that is missing or out of range
    """
    try:
        if data is None:
            return SimulationConfig()
        return SimulationConfig.model_validate(dict(data))
    except ValidationError as exc:
        errors = [(_format_location(err["loc"]), err["msg"]) for err in exc.errors()]
        raise ConfigValidationError(errors) from exc


def load_simulation_config_from_yaml(path: str | Path) -> SimulationConfig:
    with open(path, encoding="utf-8") as handle:
        payload = yaml.safe_load(handle) or {}
    if not isinstance(payload, Mapping):
        raise ConfigValidationError([("<root>", "YAML config must be a mapping")])
    return load_simulation_config(cast(Mapping[str, Any], payload))


def load_simulation_config_from_json(path: str | Path) -> SimulationConfig:
    with open(path, encoding="utf-8") as handle:
        payload = json.load(handle)
    if not isinstance(payload, Mapping):
        raise ConfigValidationError([("<root>", "JSON config must be a mapping")])
    return load_simulation_config(cast(Mapping[str, Any], payload))


def load_config_file(path: str | Path) -> SimulationConfig:
    suffix = Path(path).suffix.lower()
    if suffix in {".yaml", ".yml"}:
        return load_simulation_config_from_yaml(path)
    return load_simulation_config_from_json(path)


CONFIG_MODEL: SimulationConfig = load_simulation_config()
