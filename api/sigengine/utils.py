import base64, binascii, hashlib


def split_data_url(data_url: str):
    # "data:image/png;base64,....." -> ("image/png", "....")
    if data_url.startswith("data:") and "," in data_url:
        header, payload = data_url.split(",", 1)
        mime = header[len("data:"):].split(";", 1)[0].strip().lower()
        return mime, payload
    return None, data_url

def b64_to_bytes(payload: str) -> bytes:
    try:
        return base64.b64decode(payload)
    except (binascii.Error, ValueError):
        return b""

def sha256_bytes(b: bytes) -> str:
    return hashlib.sha256(b).hexdigest()
