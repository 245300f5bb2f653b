"""Document encoding utilities.

Responsibilities:
    - Reading uploads and local files asynchronously
    - Preserving the media type reported by the source
    - Surfacing read failures as ReadError

Output is an immutable payload sent inline to the model provider.
"""

from quantscholar.encoding.document import DocumentPayload, UploadSource, encode_document

__all__ = ["DocumentPayload", "UploadSource", "encode_document"]
