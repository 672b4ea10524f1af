"""Native desktop access: window lookup, capture and input simulation."""

from webviewbridge.desktop.backend import DesktopBackend, WindowInfo
from webviewbridge.desktop.capture import EncodedImage, encode_image

__all__ = ["DesktopBackend", "WindowInfo", "EncodedImage", "encode_image"]
