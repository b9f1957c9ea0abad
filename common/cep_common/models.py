"""
Request and response models shared by the gateway and resolver services.

Field names of the public result follow the wire format
(``temp_C``, ``temp_F``, ``temp_K``).
"""

import json

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    StrictStr,
    field_validator,
    model_validator,
)

_JSON_WHITESPACE = " \t\r\n"
_json_decoder = json.JSONDecoder()


class CepRequest(BaseModel):
    """
    Body accepted by the gateway.

    The ``cep`` key is matched case-insensitively and a ``null`` value
    leaves it empty.

    Attributes:
        cep: Postal code as sent by the client, validated separately
    """

    cep: StrictStr = ""

    @model_validator(mode="before")
    @classmethod
    def pick_cep_key(cls, data: object) -> object:
        """Keep the last non-null value whose key equals ``cep`` ignoring case."""
        if not isinstance(data, dict):
            return data
        values = [
            value
            for key, value in data.items()
            if isinstance(key, str) and key.lower() == "cep" and value is not None
        ]
        return {"cep": values[-1]} if values else {}

    @classmethod
    def from_body(cls, body: bytes) -> "CepRequest":
        """
        Parse the first JSON value of a request body.

        Anything after the first complete value is ignored. A top-level
        ``null`` yields an empty CEP.

        Args:
            body: Raw request body

        Returns:
            Parsed request

        Raises:
            ValueError: If the body holds no JSON value or it is not an
                object with a string ``cep``
        """
        text = body.decode("utf-8", errors="replace").lstrip(_JSON_WHITESPACE)
        value, _ = _json_decoder.raw_decode(text)
        if value is None:
            value = {}
        return cls.model_validate(value)


class TemperatureResult(BaseModel):
    """
    Temperature for the city a CEP resolves to.

    Attributes:
        city: City name returned by the directory API
        temp_C: Temperature in Celsius
        temp_F: Temperature in Fahrenheit
        temp_K: Temperature in Kelvin
    """

    model_config = ConfigDict(frozen=True)

    city: str
    temp_C: float
    temp_F: float
    temp_K: float


class ErrorResponse(BaseModel):
    """JSON error body returned for validation and lookup failures."""

    error: str


class DirectoryLookupResult(BaseModel):
    """Address record returned by the directory API (ViaCEP)."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    cep: str = ""
    street: str = Field(default="", validation_alias=AliasChoices("logradouro", "street"))
    complement: str = Field(
        default="", validation_alias=AliasChoices("complemento", "complement")
    )
    neighborhood: str = Field(
        default="", validation_alias=AliasChoices("bairro", "neighborhood")
    )
    city: str = Field(default="", validation_alias=AliasChoices("localidade", "city"))
    state: str = Field(default="", validation_alias=AliasChoices("uf", "state"))
    error: bool = Field(default=False, validation_alias=AliasChoices("erro", "error"))

    @field_validator("error", mode="before")
    @classmethod
    def coerce_error_flag(cls, value: object) -> object:
        """
        Accept the not-found flag as a boolean or as the string "true".

        Args:
            value: Raw ``erro`` value from the payload

        Returns:
            Value pydantic can parse as a boolean
        """
        if isinstance(value, str):
            return value.strip().lower() == "true"
        return value


class WeatherLocation(BaseModel):
    name: str = ""


class WeatherCurrent(BaseModel):
    temp_c: float


class WeatherLookupResult(BaseModel):
    """Current conditions returned by the weather API."""

    model_config = ConfigDict(frozen=True)

    location: WeatherLocation = Field(default_factory=WeatherLocation)
    current: WeatherCurrent
