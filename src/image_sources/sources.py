"""
References to an encoded heatmap image.

A heatmap image is either embedded as a base64 payload or referenced by URL.
Both variants are resolved to a `PixelBuffer` by an `ImageDecoder`, after which
decoding is identical for either kind of source.
"""

from typing import Annotated, Final, Literal

from pydantic import BaseModel, ConfigDict, Field, HttpUrl, TypeAdapter, ValidationError

from exceptions import HeatmapValidationError

BASE64_PATTERN: Final[str] = r"^[A-Za-z0-9/+]*={0,2}$"
URL_PREFIXES: Final[tuple[str, ...]] = ("http://", "https://")


class Base64Payload(BaseModel):
    kind: Literal["base64"] = "base64"
    payload: Annotated[str, Field(pattern=BASE64_PATTERN)]

    model_config = ConfigDict(frozen=True, extra="forbid")


class UrlReference(BaseModel):
    kind: Literal["url"] = "url"
    url: HttpUrl

    model_config = ConfigDict(frozen=True, extra="forbid")


ImageSource = Annotated[Base64Payload | UrlReference, Field(discriminator="kind")]

_image_source_adapter: TypeAdapter[Base64Payload | UrlReference] = TypeAdapter(ImageSource)


def as_image_source(source: object) -> Base64Payload | UrlReference:
    """
    Coerce `source` into an image source.

    Strings starting with `http://` or `https://` are treated as URLs, any other
    string must be a base64 payload. Mappings are validated against the tagged union.

    :raises HeatmapValidationError: When `source` is not a valid image source.
    """
    match source:
        case Base64Payload() | UrlReference():
            return source
        case str() if source.startswith(URL_PREFIXES):
            candidate: object = {"kind": "url", "url": source}
        case str():
            candidate = {"kind": "base64", "payload": source}
        case _:
            candidate = source
    try:
        return _image_source_adapter.validate_python(candidate)
    except ValidationError as error:
        raise HeatmapValidationError(
            "heatmap must be base64 encoded (only a-zA-Z0-9/+ followed by at most 2 '=' signs) "
            f"or an http(s) URL, got {_describe(source)}"
        ) from error


def _describe(source: object) -> str:
    if isinstance(source, str):
        return repr(source if len(source) <= 40 else f"{source[:37]}...")
    return f"a value of type {type(source).__name__}"
