"""
Auth schemas - registration, login and login-required bodies
"""

from pydantic import BaseModel, ConfigDict, Field


class RegisterRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(min_length=1, description="Display name of the client")
    api_key: str = Field(alias="apiKey", min_length=1, description="Key the client will send with every request")


class RegisterResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    api_key: str = Field(alias="apiKey")


class LoginResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    logged_in: bool = Field(alias="loggedIn")


class LoginRequiredResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    login_required: bool = Field(alias="loginRequired")
