from .balance import check_balance
from .image import generate_image, iter_image_content
from .siwe import build_siwe_message, sign_siwe_headers

__all__ = ["check_balance", "generate_image", "iter_image_content", "build_siwe_message", "sign_siwe_headers"]
