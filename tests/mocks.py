class FakeHTTPXResponse:
    def __init__(self, status_code=200, text=""):
        self.status_code = status_code
        self.text = text


class FakeHTTPXClient:
    """Stands in for ``httpx.Client`` as a context manager recording posts."""

    def __init__(self, response=None, error=None):
        self.response = response or FakeHTTPXResponse()
        self.error = error
        self.posts = []

    def __call__(self, *args, **kwargs):
        return self

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def post(self, url, **kwargs):
        self.posts.append((url, kwargs))
        if self.error is not None:
            raise self.error
        return self.response
