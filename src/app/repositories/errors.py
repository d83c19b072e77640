class DuplicateEntryError(Exception):
    """Raised by a repository when a write violates a uniqueness rule"""

    def __init__(self, field: str):
        super().__init__(f"Duplicate value for {field}")
        self.field = field
