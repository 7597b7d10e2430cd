# Display helpers. The calculator never rounds; only presentation does.


def format_currency(value: float) -> str:
    """US dollars, no cents: 1234.6 -> "$1,235", -500 -> "-$500", -0.4 -> "$0"."""
    dollars = round(value)
    sign = "-" if dollars < 0 else ""
    return f"{sign}${abs(dollars):,}"


def format_percentage(value: float) -> str:
    """One decimal place: 7.5370 -> "7.5%"."""
    return f"{value:.1f}%"
