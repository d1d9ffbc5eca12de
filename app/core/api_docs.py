from app.schemas.common import ErrorOut


_ERROR_EXAMPLES: dict[int, tuple[str, str]] = {
    400: ("invalid_amount", "Please enter a valid quantity."),
    401: ("auth_required", "Authentication required"),
    404: ("not_found", "Resource not found"),
    409: ("insufficient_stock", "Only 2 pcs available."),
    422: ("validation_error", "Validation failed"),
    500: ("internal_error", "Internal server error"),
    502: ("persistence_error", "Could not save invoice data"),
}


def error_responses(*status_codes: int) -> dict[int, dict]:
    """OpenAPI ``responses`` entries for the shared error envelope."""
    responses: dict[int, dict] = {}
    for status_code in status_codes:
        code, message = _ERROR_EXAMPLES.get(status_code, ("http_error", "HTTP error"))
        responses[status_code] = {
            "model": ErrorOut,
            "description": message,
            "content": {
                "application/json": {
                    "example": {
                        "error": {
                            "code": code,
                            "message": message,
                            "request_id": "request-id",
                            "path": "/example",
                            "details": None,
                        }
                    }
                }
            },
        }
    return responses
