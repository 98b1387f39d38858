def normalize_term(value: str) -> str:
    """Lower-case, trim and collapse inner whitespace so equal words compare equal."""
    return " ".join(value.strip().lower().split())
