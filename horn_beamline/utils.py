import math

from .errors import ConfigurationError

__all__: list[str] = []


def bounds_check_tolerance(
    x: float, xmin: float, xmax: float, rel_tol: float = 1e-9, abs_tol: float = 0.0
) -> bool:
    """Check if x is within [xmin, xmax] using relative or absolute tolerance.

    Args:
        x (float): Value to check.
        xmin (float): Lower bound.
        xmax (float): Upper bound.
        rel_tol (float, optional): Relative tolerance. Defaults to 1e-9.
        abs_tol (float, optional): Absolute tolerance. Defaults to 0.0.

    Returns:
        bool: True if x is within bounds (within tolerance), False otherwise.
    """
    return (
        xmin <= x <= xmax
        or math.isclose(x, xmin, rel_tol=rel_tol, abs_tol=abs_tol)
        or math.isclose(x, xmax, rel_tol=rel_tol, abs_tol=abs_tol)
    )


def check_finite_non_negative(name: str, value: float) -> float:
    """Return `value` as a float, raising ConfigurationError if it is negative or
    not finite.

    Args:
        name (str): Name of the quantity, used in the error message.
        value (float): Value to check.

    Returns:
        float: The checked value.
    """
    value = float(value)
    if not math.isfinite(value):
        raise ConfigurationError(f"`{name}` must be finite, got {value}")
    if value < 0:
        raise ConfigurationError(f"`{name}` must be non-negative, got {value}")
    return value


def check_finite_positive(name: str, value: float) -> float:
    """Return `value` as a float, raising ConfigurationError if it is not strictly
    positive and finite.
    """
    value = check_finite_non_negative(name, value)
    if value == 0:
        raise ConfigurationError(f"`{name}` must be positive, got {value}")
    return value
