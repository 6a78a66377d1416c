"""
RawRecord model representing one untyped row of an uploaded file (ephemeral).
"""

from pydantic import BaseModel, Field


class RawRecord(BaseModel):
    """
    One parsed, untyped row of a delimited file.

    Note: RawRecord only lives for the duration of one upload; it has no
    identity until validated into an ImportItem.

    Attributes:
        row: 1-based data row number (the first row after the header is 1)
        line: Physical line number in the file, for pointing users at the cell
        values: Header name -> cell text, in header order
    """

    row: int = Field(..., ge=1)
    line: int = Field(..., ge=2)
    values: dict[str, str]

    def get(self, field_name: str) -> str:
        """Cell text for a column, empty string when the column is absent."""
        return self.values.get(field_name, "")

    class Config:
        json_schema_extra = {
            "example": {
                "row": 1,
                "line": 2,
                "values": {
                    "questionText": "2+2=?",
                    "optionA": "3",
                    "optionB": "4",
                    "correctAnswer": "B",
                    "questionType": "MCQ",
                    "marks": "1",
                    "difficulty": "Easy",
                }
            }
        }
