import base64, json

def encode_cursor(obj: dict) -> str:
    return base64.urlsafe_b64encode(json.dumps(obj, separators=(",",":")).encode()).decode()

def decode_cursor(token: str | None) -> dict | None:
    if not token: return None
    try:
        return json.loads(base64.urlsafe_b64decode(token.encode()).decode())
    except (ValueError, UnicodeDecodeError):
        return None

def offset_from_cursor(token: str | None) -> int:
    data = decode_cursor(token) or {}
    offset = data.get("offset", 0)
    return offset if isinstance(offset, int) and offset >= 0 else 0

def next_cursor(offset: int, limit: int, total: int) -> str | None:
    nxt = offset + limit
    return encode_cursor({"offset": nxt}) if nxt < total else None
