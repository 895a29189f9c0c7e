import re

from pydantic import BaseModel, Field, field_validator

COLOR_PATTERN = re.compile(r"^#[0-9A-Fa-f]{6}$")


class TeacherOut(BaseModel):
    id: str
    name: str
    email: str
    is_active: bool

    model_config = {"from_attributes": True}


class SubjectCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    code: str = Field(min_length=1, max_length=50)
    description: str | None = None
    credits: int = Field(default=1, ge=0, le=40)
    color: str = "#3B82F6"

    @field_validator("code")
    @classmethod
    def normalize_code(cls, value: str) -> str:
        return value.strip().upper()

    @field_validator("color")
    @classmethod
    def validate_color(cls, value: str) -> str:
        if not COLOR_PATTERN.match(value):
            raise ValueError("Color must be a hex value such as #3B82F6")
        return value


class SubjectOut(SubjectCreate):
    id: str

    model_config = {"from_attributes": True}


class SchoolClassCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    description: str | None = None
    academic_year: str = Field(min_length=1, max_length=20)


class SchoolClassOut(SchoolClassCreate):
    id: str

    model_config = {"from_attributes": True}


class SectionCreate(BaseModel):
    name: str = Field(min_length=1, max_length=10)

    @field_validator("name")
    @classmethod
    def normalize_name(cls, value: str) -> str:
        return value.strip().upper()


class SectionOut(SectionCreate):
    id: str
    class_id: str

    model_config = {"from_attributes": True}


class StudentCreate(BaseModel):
    roll_number: str = Field(min_length=1, max_length=50)
    name: str = Field(min_length=1, max_length=255)
    email: str | None = Field(default=None, max_length=255)
    class_id: str = Field(min_length=1, max_length=36)
    section_id: str | None = Field(default=None, min_length=1, max_length=36)


class StudentOut(StudentCreate):
    id: str
    is_active: bool

    model_config = {"from_attributes": True}
