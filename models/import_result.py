"""
models/import_result.py
-----------------------
Outcome of a single import operation. Built once, shown, then discarded.
"""

from dataclasses import dataclass, field


@dataclass
class ImportResult:
    """
    Structured breakdown of an import batch.

    Attributes:
        imported: Number of records created.
        skipped: Number of records skipped as duplicates.
        errors: One message per rejected record (or per fatal parse problem).
        duplicates: Names of the skipped duplicate records.
    """
    imported: int = 0
    skipped: int = 0
    errors: list[str] = field(default_factory=list)
    duplicates: list[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return self.imported > 0 or (self.skipped > 0 and not self.errors)

    def summary(self) -> str:
        lines = [
            f"✅ Imported: {self.imported}",
            f"⏭️ Skipped (duplicates): {self.skipped}",
            f"⚠️ Errors: {len(self.errors)}",
        ]
        if self.duplicates:
            lines.append("\nDuplicates:\n" + "\n".join(f"  • {name}" for name in self.duplicates))
        if self.errors:
            lines.append("\nErrors:\n" + "\n".join(f"  • {err}" for err in self.errors))
        return "\n".join(lines)
