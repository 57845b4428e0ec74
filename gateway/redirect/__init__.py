from .secure_redirect import redirect_to_secure, secure_url

__all__ = ["redirect_to_secure", "secure_url"]
