class ProfileValidationError(ValueError):
    """Raised before the engine runs when required questionnaire fields are missing."""

    def __init__(self, missing_fields: list[str]):
        self.missing_fields = list(missing_fields)
        super().__init__(f"Validation failed: missing {', '.join(self.missing_fields)}")


class PhrasingMismatchError(ValueError):
    """Raised when phrasing output disagrees with the products the engine chose."""

    def __init__(self, unexpected: list[str], missing: list[str]):
        self.unexpected = list(unexpected)
        self.missing = list(missing)
        parts = []
        if self.unexpected:
            parts.append(f"unknown products {self.unexpected}")
        if self.missing:
            parts.append(f"missing products {self.missing}")
        super().__init__("Phrasing disagrees with engine selection: " + "; ".join(parts))
