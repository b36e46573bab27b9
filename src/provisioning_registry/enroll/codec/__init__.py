"""JSON codecs for enrollment entities and bulk operations."""

from .bulk_codec import decode_bulk_result, encode_bulk_operation
from .entity_codec import decode_enrollment, decode_enrollment_page, encode_enrollment, enrollment_from_dict, enrollment_to_dict

__all__ = [
    "encode_enrollment",
    "decode_enrollment",
    "decode_enrollment_page",
    "enrollment_to_dict",
    "enrollment_from_dict",
    "encode_bulk_operation",
    "decode_bulk_result",
]
