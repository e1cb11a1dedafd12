"""
Shared pydantic base model.

The web client speaks camelCase JSON (``serviceName``, ``providerEmail``,
``averageRating``) while the Python code uses snake_case.  ``CamelModel``
generates the camelCase aliases and accepts both spellings on input.
"""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )
