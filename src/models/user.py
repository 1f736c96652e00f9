"""User model for API-key authentication"""

from pydantic import BaseModel, ConfigDict, Field


class User(BaseModel):
    """
    Registered API client

    Stored as {"name": .., "apiKey": .., "allowed": ..} in
    webserver-api-keys.json.
    """

    model_config = ConfigDict(populate_by_name=True)

    name: str
    api_key: str = Field(alias="apiKey")
    allowed: bool = True
