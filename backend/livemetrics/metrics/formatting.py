"""Human-readable rendering of metric values."""

from livemetrics.metrics.models import MetricFormat


def format_value(value: float, fmt: MetricFormat, unit: str = "") -> str:
    """Render a value the way the dashboard displays it.

    Examples:
        >>> format_value(1234.5, MetricFormat.CURRENCY)
        '$1,234.50'
        >>> format_value(3.21, MetricFormat.PERCENTAGE, "%")
        '3.2%'
        >>> format_value(120.4, MetricFormat.DURATION, "ms")
        '120ms'
    """
    if fmt == MetricFormat.CURRENCY:
        sign = "-" if value < 0 else ""
        return f"{sign}${abs(value):,.2f}"
    if fmt == MetricFormat.PERCENTAGE:
        return f"{value:.1f}%"
    if fmt == MetricFormat.DURATION:
        if unit == "ms":
            return f"{value:.0f}ms"
        return f"{value:.1f}{unit}"
    if fmt == MetricFormat.RATE:
        return f"{value:.0f}{unit}"
    # Plain numbers: thousands separators, at most two decimals
    text = f"{value:,.2f}".rstrip("0").rstrip(".")
    return f"{text} {unit}" if unit else text


__all__ = ["format_value"]
