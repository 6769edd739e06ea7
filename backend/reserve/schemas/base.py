"""
Shared schema base: snake_case attributes, camelCase on the wire.
"""
from pydantic import BaseModel
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base schema that reads ORM objects and speaks camelCase JSON."""
    
    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True


class SuccessResponse(CamelModel):
    """Schema for simple acknowledgement responses."""
    success: bool = True
