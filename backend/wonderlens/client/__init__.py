from .api import WonderLensAPIError, WonderLensClient
from .compression import compress_image_to_base64

__all__ = ["WonderLensAPIError", "WonderLensClient", "compress_image_to_base64"]
