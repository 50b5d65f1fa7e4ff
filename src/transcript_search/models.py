from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from .errors import ValidationError

SEARCH_TOOL_NAME = "search_embeddings"

DEFAULT_LIMIT = 5
MAX_LIMIT = 50
DEFAULT_MIN_SCORE = 0.5

_FIELD_ERRORS = {
    "question": "Invalid parameters: question is required and must be a string",
    "limit": f"Invalid limit parameter: must be a number between 1 and {MAX_LIMIT}",
    "min_score": "Invalid min_score parameter: must be a number between 0 and 1",
}


class SearchRequest(BaseModel):
    """Arguments of the search_embeddings tool"""

    model_config = ConfigDict(extra="ignore")

    question: str = Field(strict=True, description="The query text to search for")
    limit: int = Field(
        default=DEFAULT_LIMIT,
        ge=1,
        le=MAX_LIMIT,
        description=f"Number of results to return (default: {DEFAULT_LIMIT})",
    )
    min_score: float = Field(
        default=DEFAULT_MIN_SCORE,
        ge=0,
        le=1,
        strict=True,
        description=f"Minimum similarity threshold (default: {DEFAULT_MIN_SCORE})",
    )

    @field_validator("limit", mode="before")
    @classmethod
    def _limit_is_whole_number(cls, value: Any) -> Any:
        # JSON clients may send 5.0; strings and booleans are not numbers here
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValueError("limit must be a number")
        if isinstance(value, float):
            if not value.is_integer():
                raise ValueError("limit must be a whole number")
            return int(value)
        return value


def parse_search_request(arguments: Any) -> SearchRequest:
    """Validate raw tool arguments, raising ValidationError on the first bad field."""
    if not isinstance(arguments, dict):
        raise ValidationError(_FIELD_ERRORS["question"])
    # JSON null means "not provided" for the optional fields
    cleaned = {key: value for key, value in arguments.items() if value is not None}
    try:
        return SearchRequest.model_validate(cleaned)
    except PydanticValidationError as exc:
        for error in exc.errors():
            field = error["loc"][0] if error["loc"] else "question"
            if field in _FIELD_ERRORS:
                raise ValidationError(_FIELD_ERRORS[field]) from exc
        raise ValidationError(str(exc)) from exc


def search_tool_definition() -> dict[str, Any]:
    """Describe the search tool and its input schema for tool listings."""
    return {
        "name": SEARCH_TOOL_NAME,
        "description": "Search for relevant transcript segments using vector similarity",
        "inputSchema": {
            "type": "object",
            "properties": {
                "question": {
                    "type": "string",
                    "description": "The query text to search for",
                },
                "limit": {
                    "type": "number",
                    "description": f"Number of results to return (default: {DEFAULT_LIMIT})",
                    "minimum": 1,
                    "maximum": MAX_LIMIT,
                },
                "min_score": {
                    "type": "number",
                    "description": (
                        f"Minimum similarity threshold (default: {DEFAULT_MIN_SCORE})"
                    ),
                    "minimum": 0,
                    "maximum": 1,
                },
            },
            "required": ["question"],
        },
    }
