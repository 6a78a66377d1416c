"""
ImportItem models: the typed, validated projection of a RawRecord.

An ImportItem is either a QuestionItem or a CourseItem, told apart by the
``kind`` discriminator. Items carry no row number so that an item exported
with the template layout and parsed again compares equal to the original.
"""

from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, Field, model_validator

QUESTION_TYPES = ("MCQ", "True-False", "Short Answer")
DIFFICULTIES = ("Easy", "Medium", "Hard")
COURSE_CATEGORIES = ("Core", "Elective", "Laboratory", "Seminar", "Project", "Internship")
OPTION_COLUMNS = ("optionA", "optionB", "optionC", "optionD")


def answer_letter(index: int) -> str:
    """0 -> "A", 1 -> "B", ..."""
    return chr(ord("A") + index)


class QuestionItem(BaseModel):
    """
    A validated quiz question.

    Attributes:
        question_text: The question stem
        options: Non-empty answer options in column order (empty for Short Answer)
        correct_answer: Option index for MCQ/True-False, model answer text for Short Answer
        question_type: MCQ, True-False or Short Answer
        marks: Marks awarded, 1-10
        difficulty: Easy, Medium or Hard
        explanation: Optional explanation shown after answering
        category: Optional free-text category
    """

    kind: Literal["question"] = "question"
    question_text: str = Field(..., min_length=1)
    options: list[str] = Field(default_factory=list)
    correct_answer: int | str
    question_type: Literal["MCQ", "True-False", "Short Answer"]
    marks: int = Field(..., ge=1, le=10)
    difficulty: Literal["Easy", "Medium", "Hard"]
    explanation: str = ""
    category: str = ""

    @model_validator(mode="after")
    def check_answer_key(self) -> "QuestionItem":
        """Option-based questions need an index into options; Short Answer needs text."""
        if self.question_type == "Short Answer":
            if not isinstance(self.correct_answer, str) or not self.correct_answer.strip():
                raise ValueError("Short Answer questions need a model answer")
            if self.options:
                raise ValueError("Short Answer questions cannot have options")
            return self

        if not isinstance(self.correct_answer, int) or isinstance(self.correct_answer, bool):
            raise ValueError(f"{self.question_type} correct_answer must be an option index")
        if not 0 <= self.correct_answer < len(self.options):
            raise ValueError(
                f"correct_answer index {self.correct_answer} is outside the {len(self.options)} options"
            )
        return self

    @property
    def dedupe_key(self) -> str:
        return self.question_text

    def to_document(self) -> dict[str, Any]:
        """Fields as the dashboard stores them in a quiz's questions collection."""
        return {
            "questionText": self.question_text,
            "options": list(self.options),
            "correctAnswer": self.correct_answer,
            "questionType": self.question_type,
            "marks": self.marks,
            "difficulty": self.difficulty,
            "explanation": self.explanation,
            "category": self.category,
        }

    def to_row(self) -> dict[str, str]:
        """Cells in the upload template layout."""
        row = {
            "questionText": self.question_text,
            "correctAnswer": (
                self.correct_answer
                if isinstance(self.correct_answer, str)
                else answer_letter(self.correct_answer)
            ),
            "questionType": self.question_type,
            "marks": str(self.marks),
            "difficulty": self.difficulty,
            "explanation": self.explanation,
            "category": self.category,
        }
        for idx, column in enumerate(OPTION_COLUMNS):
            row[column] = self.options[idx] if idx < len(self.options) else ""
        return row


class CourseItem(BaseModel):
    """
    A validated course offering.

    Attributes:
        course_code: Course code, e.g. CSA101
        course_name: Display name
        subject_category: Subject area, e.g. Computer Science
        course_category: Core, Elective, Laboratory, Seminar, Project or Internship
        description: Optional description
        credits: Credit hours, 1-6
        prerequisites: Free text, "None" when there are none
    """

    kind: Literal["course"] = "course"
    course_code: str = Field(..., min_length=1)
    course_name: str = Field(..., min_length=1)
    subject_category: str = Field(..., min_length=1)
    course_category: Literal["Core", "Elective", "Laboratory", "Seminar", "Project", "Internship"]
    description: str = ""
    credits: int = Field(..., ge=1, le=6)
    prerequisites: str = ""

    @property
    def dedupe_key(self) -> str:
        return self.course_code

    def to_document(self) -> dict[str, Any]:
        return {
            "courseCode": self.course_code,
            "courseName": self.course_name,
            "subjectCategory": self.subject_category,
            "courseCategory": self.course_category,
            "description": self.description,
            "credits": self.credits,
            "prerequisites": self.prerequisites,
        }

    def to_row(self) -> dict[str, str]:
        row = self.to_document()
        row["credits"] = str(self.credits)
        return row


ImportItem = Annotated[Union[QuestionItem, CourseItem], Field(discriminator="kind")]
