class InvalidInputError(ValueError):
    """Raised when a numeric range or ordering precondition is violated.

    Carries the offending field name and the constraint it broke so callers
    can point the user at the exact input to fix.
    """

    def __init__(self, field: str, constraint: str):
        self.field = field
        self.constraint = constraint
        super().__init__(f"{field} {constraint}")


def require_non_negative(field: str, value: float) -> None:
    if value < 0:
        raise InvalidInputError(field, "cannot be negative")


def require_range(field: str, value: float, low: float, high: float, unit: str = "") -> None:
    """Raise unless low <= value <= high."""
    if value < low or value > high:
        raise InvalidInputError(field, f"must be between {low}{unit} and {high}{unit}")
