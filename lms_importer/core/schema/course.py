"""
Course catalogue schema.
"""

from datetime import datetime
from typing import Any

from lms_importer.core.models import CommitTarget, CourseItem, Uploader
from lms_importer.core.models.import_item import COURSE_CATEGORIES
from lms_importer.core.rules.rule_config import RuleConfigBuilder

from .entity_schema import EntitySchema

COURSE_COLUMNS = [
    "courseCode",
    "courseName",
    "subjectCategory",
    "courseCategory",
    "description",
    "credits",
    "prerequisites",
]

COURSE_RULES = (
    RuleConfigBuilder()
    .add_required_field("courseCode", "courseName", "subjectCategory", "courseCategory")
    .add_enum("courseCategory", COURSE_CATEGORIES, case_insensitive=True)
    .add_range("credits", min_value=1, max_value=6)
    .build()
)

COURSE_FIELD_MAP = {
    "course_code": "courseCode",
    "course_name": "courseName",
    "subject_category": "subjectCategory",
    "course_category": "courseCategory",
    "description": "description",
    "credits": "credits",
    "prerequisites": "prerequisites",
}

COURSE_EXAMPLES = [
    ["CSA101", "Introduction to Programming", "Computer Science", "Core",
     "Basic programming concepts and problem solving", "3", "None"],
    ["CSA102", "Data Structures", "Computer Science", "Core",
     "Fundamental data structures and algorithms", "4", "CSA101"],
    ["CSA201", "Web Development", "Computer Science", "Elective",
     "Modern web development technologies", "3", "CSA101"],
]


def build_course(values: dict[str, Any]) -> CourseItem:
    return CourseItem(
        course_code=values["courseCode"],
        course_name=values["courseName"],
        subject_category=values["subjectCategory"],
        course_category=values["courseCategory"],
        description=values.get("description", ""),
        credits=values["credits"],
        prerequisites=values.get("prerequisites", ""),
    )


def course_attribution(uploader: Uploader, now: datetime) -> dict[str, Any]:
    # New courses wait for admin approval
    return {
        "facultyId": uploader.uid,
        "facultyName": uploader.display_name,
        "isApproved": False,
        "createdAt": now,
        "enrolledStudents": 0,
    }


def course_target(**_ignored) -> CommitTarget:
    return CommitTarget(collection="courses")


COURSE_SCHEMA = EntitySchema(
    name="course",
    columns=COURSE_COLUMNS,
    rules=COURSE_RULES,
    builder=build_course,
    field_map=COURSE_FIELD_MAP,
    dedupe_column="courseCode",
    dedupe_match="substring",
    attribution=course_attribution,
    target_factory=course_target,
    max_bytes=10 * 1024 * 1024,
    example_rows=COURSE_EXAMPLES,
)
