CDN_URL = "https://cdn.example/x.png"
BOUNDARY = "----shopifyboundary7MA4YWxkTrZu0gW"


class FakeStore:
    """Stands in for ShopifyClient in route and pipeline tests"""

    def __init__(self, url=CDN_URL, error=None):
        self.url = url
        self.error = error
        self.uploads = []
        self.products = []
        self.products_error = None
        self.requested_limit = None
        self.connected = True
        self.connection_error = None
        self.blog_id = "123456"
        self.blog_error = None

    def upload_image(self, data, filename, alt_text):
        self.uploads.append((data, filename, alt_text))
        if self.error:
            raise self.error
        return self.url

    def get_products(self, limit=250):
        self.requested_limit = limit
        if self.products_error:
            raise self.products_error
        return self.products

    def validate_connection(self):
        if self.connection_error:
            raise self.connection_error
        return self.connected

    def get_blog_id(self):
        if self.blog_error:
            raise self.blog_error
        return self.blog_id


def multipart_body(parts, boundary=BOUNDARY):
    """
    Build a multipart/form-data body by hand

    ``parts`` is a list of (name, value) for text fields or
    (name, filename, mime_type, data) for file parts, in wire order.
    """
    lines = []
    for part in parts:
        lines.append(f"--{boundary}\r\n".encode())
        if len(part) == 2:
            name, value = part
            lines.append(f'Content-Disposition: form-data; name="{name}"\r\n\r\n'.encode())
            lines.append(value.encode("utf-8"))
        else:
            name, filename, mime_type, data = part
            lines.append(
                f'Content-Disposition: form-data; name="{name}"; filename="{filename}"\r\n'
                f"Content-Type: {mime_type}\r\n\r\n".encode()
            )
            lines.append(data)
        lines.append(b"\r\n")
    lines.append(f"--{boundary}--\r\n".encode())
    return b"".join(lines)


def content_type_for(boundary=BOUNDARY):
    return f"multipart/form-data; boundary={boundary}"


async def stream_chunks(data, size=16):
    for i in range(0, len(data), size):
        yield data[i:i + size]


class FakeResponse:
    """Minimal requests.Response replacement"""

    def __init__(self, status_code=200, payload=None, reason="OK", text=None):
        self.status_code = status_code
        self.payload = payload
        self.reason = reason
        self.text = text if text is not None else ("" if payload is None else str(payload))

    @property
    def ok(self):
        return self.status_code < 400

    def json(self):
        if self.payload is None:
            raise ValueError("No JSON object could be decoded")
        return self.payload
