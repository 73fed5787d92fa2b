"""Import/export data models."""

from dataclasses import dataclass


@dataclass
class ImportReport:
    """Outcome of importing a session export file."""
    added: int = 0
    skipped_duplicates: int = 0
    failed: int = 0

    @property
    def message(self) -> str:
        """Human readable summary of the import."""
        text = (f"Import complete. {self.added} sessions added, "
                f"{self.skipped_duplicates} skipped (duplicates).")
        if self.failed > 0:
            text += f" {self.failed} entries failed to parse."
        return text
