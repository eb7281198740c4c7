"""Exception hierarchy for CellarBook.

Validation errors map to HTTP 400, missing records to 404 and storage
failures to 500. The handlers live in ``cellarbook.main``.
"""


class CellarBookError(Exception):
    """Base class for all CellarBook errors."""


class CellarValidationError(CellarBookError):
    """Input was well-formed JSON but violates a domain rule."""

    field: str | None = None

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        if field is not None:
            self.field = field

    def to_errors(self) -> list[dict]:
        """Structured field errors for the API response body."""
        return [{"field": self.field, "message": self.message}]


class InvalidVintageYear(CellarValidationError):
    """A vintage year fell outside [minimum, maximum]."""

    field = "vintage"

    def __init__(self, year: int, minimum: int, maximum: int) -> None:
        self.year = year
        self.minimum = minimum
        self.maximum = maximum
        if year < minimum:
            self.bound = "minimum"
            message = f"Vintage must be at least {minimum}"
        else:
            self.bound = "maximum"
            message = f"Vintage cannot be later than {maximum}"
        super().__init__(message)

    def to_errors(self) -> list[dict]:
        return [
            {
                "field": self.field,
                "message": self.message,
                "value": self.year,
                "minimum": self.minimum,
                "maximum": self.maximum,
            }
        ]


class VintageNotApplicable(CellarValidationError):
    """Vintage operation attempted on a category without vintage tracking."""

    field = "category"

    def __init__(self, category: str) -> None:
        self.category = category
        super().__init__(f"Vintage tracking does not apply to category {category}")


class StockDerivedFromVintages(CellarValidationError):
    """Direct stock change attempted on a wine whose total comes from vintages."""

    field = "stockLevel"

    def __init__(self, wine_id: int) -> None:
        self.wine_id = wine_id
        super().__init__(
            f"Stock level of wine {wine_id} is derived from its vintages; "
            "change the vintage entries instead"
        )


class NotFoundError(CellarBookError):
    """A requested record does not exist."""


class WineNotFound(NotFoundError):
    """No wine with the given id."""

    def __init__(self, wine_id: int) -> None:
        self.wine_id = wine_id
        super().__init__(f"Wine with ID {wine_id} not found")


class StorageError(CellarBookError):
    """The underlying persistence layer failed."""
