"""Multipart tool results - moves media out of tool-result slots."""

from octo.multipart.middleware import MultipartResultMiddleware
from octo.multipart.splitter import MEDIA_PLACEHOLDER, split_multipart_results

__all__ = ["MEDIA_PLACEHOLDER", "MultipartResultMiddleware", "split_multipart_results"]
