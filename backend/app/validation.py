"""
Input validation helpers shared by the resolvers.
All helpers raise ``InvalidArgument`` and return cleaned values.
"""

from app.errors import InvalidArgument
from app.models.models import DRUG_SOURCES, INTERACTION_SOURCES, NAME_MAX_LENGTH, SEVERITIES

# camelCase API field -> Drug column
DRUG_FIELDS = {
    "name": "name",
    "genericName": "generic_name",
    "description": "description",
    "category": "category",
    "sideEffects": "side_effects",
    "contraindications": "contraindications",
    "dosage": "dosage",
    "aiAnalysis": "ai_analysis",
    "source": "source",
}
REQUIRED_DRUG_FIELDS = ("name", "description", "category")
# API fields stored in length-limited columns
BOUNDED_FIELDS = ("name", "genericName", "category", "interactionType")
IMMUTABLE_FIELDS = ("id", "_id", "createdAt", "updatedAt")


def require_text(value, field: str) -> str:
    """Return *value* trimmed; reject non-strings and blank strings."""
    if not isinstance(value, str) or not value.strip():
        raise InvalidArgument(f"'{field}' must be a non-empty string.")
    return _check_length(value.strip(), field)


def optional_text(value, field: str):
    if value is None:
        return None
    if not isinstance(value, str):
        raise InvalidArgument(f"'{field}' must be a string.")
    return _check_length(value.strip(), field) or None


def _check_length(value: str, field: str) -> str:
    if field in BOUNDED_FIELDS and len(value) > NAME_MAX_LENGTH:
        raise InvalidArgument(f"'{field}' must be at most {NAME_MAX_LENGTH} characters.")
    return value


def string_list(value, field: str) -> list[str]:
    if value is None:
        return []
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise InvalidArgument(f"'{field}' must be a list of strings.")
    return [v.strip() for v in value if v.strip()]


def parse_id(value, field: str = "id") -> int:
    """Accept ints and numeric strings; reject everything else."""
    if isinstance(value, bool):
        raise InvalidArgument(f"'{field}' must be an integer identifier.")
    if isinstance(value, int):
        if value < 1:
            raise InvalidArgument(f"'{field}' must be a positive identifier.")
        return value
    if isinstance(value, str) and value.strip().isdecimal():
        return parse_id(int(value.strip()), field)
    raise InvalidArgument(f"'{field}' must be an integer identifier.")


def parse_severity(value) -> str:
    severity = value.strip().lower() if isinstance(value, str) else value
    if severity not in SEVERITIES:
        raise InvalidArgument("Severity must be one of: low, medium, high.")
    return severity


def clean_drug_fields(data, partial: bool = False) -> dict:
    """
    Validate an API payload for a Drug and map it to column names.

    With ``partial=True`` only the supplied keys are validated (PATCH merge);
    immutable keys are dropped silently, unknown keys are rejected.
    """
    if not isinstance(data, dict):
        raise InvalidArgument("Drug payload must be a JSON object.")

    unknown = [k for k in data if k not in DRUG_FIELDS and k not in IMMUTABLE_FIELDS]
    if unknown:
        raise InvalidArgument(f"Unknown drug fields: {', '.join(sorted(unknown))}")

    cleaned = {}
    for api_key, column in DRUG_FIELDS.items():
        if api_key not in data:
            if not partial and api_key in REQUIRED_DRUG_FIELDS:
                raise InvalidArgument(f"'{api_key}' must be a non-empty string.")
            continue
        value = data[api_key]
        if api_key in REQUIRED_DRUG_FIELDS:
            cleaned[column] = require_text(value, api_key)
        elif api_key in ("sideEffects", "contraindications"):
            cleaned[column] = string_list(value, api_key)
        elif api_key == "source":
            if value not in DRUG_SOURCES:
                raise InvalidArgument("Drug source must be 'manual' or 'ai'.")
            cleaned[column] = value
        else:
            cleaned[column] = optional_text(value, api_key)

    if partial and not cleaned:
        raise InvalidArgument("No updatable drug fields supplied.")
    return cleaned


def clean_interaction_fields(data) -> dict:
    """Validate the descriptive part of an Interaction payload."""
    if not isinstance(data, dict):
        raise InvalidArgument("Interaction payload must be a JSON object.")
    source = data.get("source") or "database"
    if source not in INTERACTION_SOURCES:
        raise InvalidArgument("Interaction source must be 'database' or 'ai'.")
    return {
        "interaction_type": require_text(data.get("interactionType"), "interactionType"),
        "severity": parse_severity(data.get("severity")),
        "description": require_text(data.get("description"), "description"),
        "recommendation": require_text(data.get("recommendation"), "recommendation"),
        "source": source,
    }
