"""Base model shared by every record exchanged with the shop backend."""

from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class WireModel(BaseModel):
    """Base class for backend records: camelCase on the wire, immutable in memory."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        frozen=True,
    )


def id_field(**kwargs):
    """Field for record ids; the backend sends ``_id``, derived records use ``id``."""
    return Field(validation_alias=AliasChoices("_id", "id"), serialization_alias="id", **kwargs)
