"""Password validation functions."""

MIN_PASSWORD_LENGTH = 8
MAX_PASSWORD_LENGTH = 72


def validate_password_strength(password: str) -> str:
    """Validate password requirements for new accounts.

    Requirements:
    - Between 8 and 72 characters
    - At least one letter
    - At least one digit
    - No leading or trailing whitespace

    Args:
        password: Password string to validate

    Returns:
        The validated password string

    Raises:
        ValueError: If password doesn't meet the requirements

    Examples:
        >>> validate_password_strength("crimpy2024")
        'crimpy2024'
        >>> validate_password_strength("onlyletters")
        Traceback (most recent call last):
        ...
        ValueError: Password must contain at least one digit

    """
    if not MIN_PASSWORD_LENGTH <= len(password) <= MAX_PASSWORD_LENGTH:
        raise ValueError(f"Password must be between {MIN_PASSWORD_LENGTH} and {MAX_PASSWORD_LENGTH} characters")
    if password != password.strip():
        raise ValueError("Password must not start or end with whitespace")
    if not any(c.isalpha() for c in password):
        raise ValueError("Password must contain at least one letter")
    if not any(c.isdigit() for c in password):
        raise ValueError("Password must contain at least one digit")
    return password
