# authguard/application/dtos/base_dto.py

from pydantic import BaseModel, ConfigDict


class CustomBaseModel(BaseModel):
    """
    Base DTO: strips surrounding whitespace and reads from attributes
    (dataclasses, ORM rows).
    """
    model_config = ConfigDict(
        from_attributes=True,
        str_strip_whitespace=True,
    )
