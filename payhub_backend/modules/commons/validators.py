"""Field validators shared by request schemas."""


def reject_placeholder_ssn(value: str) -> str:
    """Normalize an SSN and refuse the all-zero placeholder."""
    digits = value.replace("-", "").strip()
    if not digits.isdigit() or len(digits) not in (4, 9):
        raise ValueError("SSN must be the last 4 digits or the full 9 digits")
    if set(digits) == {"0"}:
        raise ValueError("SSN placeholder value is not accepted")
    return digits
