"""Direct-upload signature schema."""

from eventfold.schemas.album import CamelModel


class SignatureResponse(CamelModel):
    signature: str
    timestamp: int
    cloud_name: str
    api_key: str
    folder: str
