"""
Base schema classes
"""
from pydantic import BaseModel as PydanticBaseModel
from pydantic.alias_generators import to_camel


class BaseSchema(PydanticBaseModel):
    """Base schema with common configuration"""

    class Config:
        from_attributes = True  # Allows ORM mode (formerly orm_mode)
        populate_by_name = True


class CamelSchema(BaseSchema):
    """Schema whose wire names are the camelCase form of its attributes"""

    class Config:
        from_attributes = True
        populate_by_name = True
        alias_generator = to_camel
        extra = "ignore"
