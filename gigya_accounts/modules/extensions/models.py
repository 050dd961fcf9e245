"""
Extension request and response models.

The service calls an extension endpoint before certain account operations.
Each extension point has its own request variant, selected by the
``extensionPoint`` discriminator; unknown extension points fail validation.
"""

from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, SecretStr, TypeAdapter


class _Lenient(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class ExtensionContext(_Lenient):
    """Request context forwarded by the service."""

    client_ip: Optional[str] = Field(None, alias="clientIP")


class RegisterParams(_Lenient):
    email: Optional[str] = None
    lang: Optional[str] = None
    locale: Optional[str] = None
    first_name: Optional[str] = Field(None, alias="firstName")
    last_name: Optional[str] = Field(None, alias="lastName")
    country: Optional[str] = None
    postal_code: Optional[str] = Field(None, alias="postalcode")
    state: Optional[str] = None
    state_name: Optional[str] = Field(None, alias="stateName")


class LoginParams(_Lenient):
    login_id: Optional[str] = Field(None, alias="loginId")
    password: Optional[SecretStr] = None
    lang: Optional[str] = None


class SetAccountInfoParams(_Lenient):
    profile: Optional[Dict[str, Any]] = None
    data: Optional[Dict[str, Any]] = None
    lang: Optional[str] = None


class _ExtensionData(_Lenient):
    account_info: Optional[Dict[str, Any]] = Field(None, alias="accountInfo")
    context: Optional[ExtensionContext] = None


class RegisterData(_ExtensionData):
    params: RegisterParams = Field(default_factory=RegisterParams)


class LoginData(_ExtensionData):
    params: LoginParams = Field(default_factory=LoginParams)


class SetAccountInfoData(_ExtensionData):
    params: SetAccountInfoParams = Field(default_factory=SetAccountInfoParams)


class _ExtensionRequestBase(_Lenient):
    api_key: Optional[str] = Field(None, alias="apiKey")
    call_id: Optional[str] = Field(None, alias="callID")


class OnBeforeAccountsRegister(_ExtensionRequestBase):
    extension_point: Literal["OnBeforeAccountsRegister"] = Field(alias="extensionPoint")
    data: RegisterData


class OnBeforeAccountsLogin(_ExtensionRequestBase):
    extension_point: Literal["OnBeforeAccountsLogin"] = Field(alias="extensionPoint")
    data: LoginData


class OnBeforeSetAccountInfo(_ExtensionRequestBase):
    extension_point: Literal["OnBeforeSetAccountInfo"] = Field(alias="extensionPoint")
    data: SetAccountInfoData


ExtensionRequest = Annotated[
    Union[OnBeforeAccountsRegister, OnBeforeAccountsLogin, OnBeforeSetAccountInfo],
    Field(discriminator="extension_point"),
]

extension_request_adapter: TypeAdapter = TypeAdapter(ExtensionRequest)


class ValidationErrorItem(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    field_name: str = Field(..., alias="fieldName")
    message: str


class ExtensionResponse(BaseModel):
    """Answer returned to the service."""

    status: Literal["OK", "FAIL", "ENRICH"]
    data: Optional[Dict[str, Any]] = None

    @classmethod
    def ok(cls) -> "ExtensionResponse":
        return cls(status="OK")

    @classmethod
    def fail(
        cls,
        validation_errors: Optional[List[ValidationErrorItem]] = None,
        user_facing_message: Optional[str] = None,
    ) -> "ExtensionResponse":
        data: Dict[str, Any] = {}
        if validation_errors:
            data["validationErrors"] = [
                item.model_dump(by_alias=True) for item in validation_errors
            ]
        if user_facing_message:
            data["userFacingErrorMessage"] = user_facing_message
        return cls(status="FAIL", data=data or None)

    @classmethod
    def enrich(cls, data: Dict[str, Any]) -> "ExtensionResponse":
        return cls(status="ENRICH", data=data)
