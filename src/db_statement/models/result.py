"""Portable result models returned by statement execution."""

from typing import Any, Union

from pydantic import BaseModel, Field, model_validator


class PortableResult(BaseModel):
    """Tabular result of a query, holding portable values only."""

    columns: list[str] = Field(
        ..., description="Column labels in source order (duplicates allowed)"
    )
    rows: list[list[Any]] = Field(
        default_factory=list, description="Rows aligned with the column list"
    )

    @model_validator(mode="after")
    def check_row_width(self) -> "PortableResult":
        """Ensure every row has one value per column."""
        width = len(self.columns)
        for index, row in enumerate(self.rows):
            if len(row) != width:
                raise ValueError(
                    f"Row {index} has {len(row)} values, expected {width}"
                )
        return self

    @property
    def row_count(self) -> int:
        """Get number of rows."""
        return len(self.rows)

    @property
    def column_count(self) -> int:
        """Get number of columns."""
        return len(self.columns)

    @property
    def is_empty(self) -> bool:
        """Check if result set is empty."""
        return self.row_count == 0

    def get_column_values(self, column: Union[str, int]) -> list[Any]:
        """
        Extract all values of one column.

        Args:
            column: Column label (first match wins) or 0-based position

        Returns:
            Values of that column, one per row

        Raises:
            KeyError: If no column has the given label
        """
        if isinstance(column, int):
            index = column
        else:
            try:
                index = self.columns.index(column)
            except ValueError:
                raise KeyError(column) from None
        return [row[index] for row in self.rows]

    def to_dicts(self) -> list[dict[str, Any]]:
        """Rows as dictionaries; with duplicate labels the last column wins."""
        return [dict(zip(self.columns, row)) for row in self.rows]

    def to_table_string(self, max_rows: int = 10) -> str:
        """Format result as a simple table string."""
        if self.is_empty:
            return "No rows returned"

        # Header
        result_lines = [" | ".join(self.columns)]
        result_lines.append("-" * len(result_lines[0]))

        for row in self.rows[:max_rows]:
            values = ["NULL" if value is None else str(value) for value in row]
            result_lines.append(" | ".join(values))

        if self.row_count > max_rows:
            result_lines.append(f"... ({self.row_count - max_rows} more rows)")

        return "\n".join(result_lines)

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "columns": ["id", "name"],
                    "rows": [[1, "alice"], [2, "bob"]],
                }
            ]
        }
    }


class UpdateResult(BaseModel):
    """Outcome of an INSERT, UPDATE or DELETE statement."""

    updated: int = Field(..., description="Number of rows affected (-1 if unknown)")
    keys: list[Any] = Field(
        default_factory=list, description="Generated keys reported by the driver"
    )
