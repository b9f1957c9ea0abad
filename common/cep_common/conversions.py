"""Temperature scale conversions: F = C * 1.8 + 32, K = C + 273."""

KELVIN_OFFSET = 273


def celsius_to_fahrenheit(celsius: float) -> float:
    return celsius * 1.8 + 32


def celsius_to_kelvin(celsius: float) -> float:
    return celsius + KELVIN_OFFSET
