"""Static catalog of the models served by the prediction service.

Also holds the small helpers the dashboard needs to turn feature names and
service responses into form inputs and display values.
"""

from collections.abc import Mapping
from typing import Any

from src.models.schemas import ModelDescriptor

DEFAULT_MODEL = "weather"

MODELS: tuple[ModelDescriptor, ...] = (
    ModelDescriptor(
        name="weather",
        display_name="Weather Prediction",
        description="Predict weather conditions for mining operations",
        features=(
            "Temperature_C",
            "Humidity_Percent",
            "Rainfall_mm",
            "Wind_Speed_mps",
            "Weather_Condition",
        ),
    ),
    ModelDescriptor(
        name="road",
        display_name="Road Condition",
        description="Predict road conditions and accessibility",
        features=(
            "Surface_Type",
            "Surface_Condition",
            "Traffic_Density",
            "Flood_Level_m",
            "Access_Status",
        ),
    ),
    ModelDescriptor(
        name="equipment",
        display_name="Equipment Health",
        description="Predict equipment maintenance needs and failures",
        features=(
            "Machine_Type",
            "Engine_Temperature_C",
            "Fuel_Level_Percent",
            "Maintenance_Status",
            "Working_Hours",
        ),
    ),
    ModelDescriptor(
        name="vessel",
        display_name="Vessel Performance",
        description="Predict vessel delays and performance",
        features=(
            "Delay_Minutes",
            "Cargo_Type",
            "Load_Weight_Tons",
            "Port_Condition",
            "Sea_Condition_Code",
        ),
    ),
    ModelDescriptor(
        name="logistics",
        display_name="Logistics Optimization",
        description="Predict logistics delays and optimize routes",
        features=(
            "Cargo_Type",
            "Distance_km",
            "Travel_Time_hr",
            "Delivery_Status",
            "CO2_Emission_kg",
        ),
    ),
    ModelDescriptor(
        name="production",
        display_name="Production Efficiency",
        description="Predict production output and efficiency",
        features=(
            "Material_Type",
            "Production_Tons",
            "Fuel_Consumed_Liters",
            "Equipment_Efficiency_Percent",
            "Downtime_Minutes",
        ),
    ),
)

_MODELS_BY_NAME = {model.name: model for model in MODELS}

# Substrings that mark a feature as a categorical choice
CATEGORICAL_MARKERS = ("Condition", "Status", "Type", "Mode")
CATEGORICAL_OPTIONS = (
    "Good",
    "Moderate",
    "Poor",
    "Clear",
    "Rainy",
    "Storm",
    "Open",
    "Closed",
)


class UnknownModelError(KeyError):
    """Raised when a model name is not in the catalog."""

    pass


def get_model(name: str) -> ModelDescriptor:
    """Look up a model by name.

    Raises:
        UnknownModelError: If the catalog has no such model.
    """
    try:
        return _MODELS_BY_NAME[name]
    except KeyError:
        raise UnknownModelError(name) from None


def is_categorical(feature: str) -> bool:
    return any(marker in feature for marker in CATEGORICAL_MARKERS)


def feature_label(feature: str) -> str:
    return feature.replace("_", " ")


def parse_numeric(value: Any) -> float:
    """Parse a numeric form value, falling back to 0 for blank or bad input."""
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def format_probability(score: float) -> str:
    return f"{score * 100:.1f}%"


def blank_inputs(model: ModelDescriptor) -> dict[str, Any]:
    return {feature: "" for feature in model.features}


def build_input_values(model: ModelDescriptor, sample: Mapping[str, Any]) -> dict[str, Any]:
    """Key a test-data sample by the model's feature list.

    Features missing from the sample are left blank and keys the model does
    not declare are dropped.
    """
    values = blank_inputs(model)
    for feature in model.features:
        value = sample.get(feature)
        if value is not None:
            values[feature] = value
    return values


def rank_labels(probabilities: Mapping[str, float]) -> list[str]:
    """Order labels by descending confidence.

    The sort is stable, so labels with equal scores keep the order the
    service returned them in.
    """
    return [
        label
        for label, _ in sorted(probabilities.items(), key=lambda item: item[1], reverse=True)
    ]
