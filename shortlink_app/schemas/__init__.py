from .link import ShortenRequest, ShortLinkResponse, validate_target_url

__all__ = ["ShortenRequest", "ShortLinkResponse", "validate_target_url"]
