from pydantic import BaseModel, Field


class ClassroomBase(BaseModel):
    room_number: str = Field(min_length=1, max_length=50)
    capacity: int = Field(ge=1, le=1000)
    building: str | None = Field(default=None, max_length=100)
    floor: int | None = Field(default=None, ge=-5, le=200)
    has_projector: bool = False
    has_computer: bool = False


class ClassroomCreate(ClassroomBase):
    pass


class ClassroomUpdate(BaseModel):
    room_number: str | None = Field(default=None, min_length=1, max_length=50)
    capacity: int | None = Field(default=None, ge=1, le=1000)
    building: str | None = Field(default=None, max_length=100)
    floor: int | None = Field(default=None, ge=-5, le=200)
    has_projector: bool | None = None
    has_computer: bool | None = None


class ClassroomOut(ClassroomBase):
    id: str

    model_config = {"from_attributes": True}
