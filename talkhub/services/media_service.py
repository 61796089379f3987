import base64

from talkhub.schemas.message import UploadedFile

DEFAULT_CONTENT_TYPE = "application/octet-stream"


def encode_upload(name: str, content_type: str | None, data: bytes) -> UploadedFile:
    """Base64 pass-through of an uploaded file; nothing is stored."""
    return UploadedFile(
        name=name,
        type=content_type or "",
        size=len(data),
        data=base64.b64encode(data).decode("ascii"),
    )


def to_data_uri(uploaded: UploadedFile) -> str:
    """Embed an encoded upload as a data URI usable as ``fileUrl`` on send."""
    return f"data:{uploaded.type or DEFAULT_CONTENT_TYPE};base64,{uploaded.data}"
