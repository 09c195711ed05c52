"""RadioManager Dialog Service.

Thin HTTP adapter letting a voice-assistant dialog engine query the
RadioManager content backend (presenters, programs, broadcasts, songs):
- Signed outbound requests (basic auth, TLS client cert, HMAC, retry)
- Elastic-style query building scoped per content type
- Search hit normalization with Dutch date formatting
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
