import hashlib
import hmac


def verify_github_signature(secret: str, body: bytes, signature: str) -> bool:
    """Check the ``X-Hub-Signature-256`` header GitHub sends with every delivery."""
    if not signature:
        return False
    expected = "sha256=" + hmac.new(secret.encode(), body, hashlib.sha256).hexdigest()
    return hmac.compare_digest(expected, signature)
