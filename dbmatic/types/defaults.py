"""Default lengths, precisions and scales applied when a descriptor does not supply them."""

DEFAULT_STRING_LENGTH = 255
DEFAULT_BINARY_LENGTH = 255
DEFAULT_DECIMAL_PRECISION = 16
DEFAULT_DECIMAL_SCALE = 4
DEFAULT_ENUM_LENGTH = 128
GUID_STRING_LENGTH = 36
MAX_LENGTH = 2**31 - 1
