from loguru import logger


def _trim_slash(path: str) -> str:
    """Drop one trailing slash, keeping the bare root"""
    if len(path) > 1 and path.endswith("/"):
        return path[:-1]
    return path


class PrefixRewriter:
    """
    Strip the API prefix before routing: /api/v1/users/1 -> /users/1.

    One trailing slash is dropped from every path (/users/ -> /users), so
    routing never answers with a redirect that loses the prefix. Requests
    matching one of ``exempt`` (method, path) pairs keep their prefixed path
    so routes mounted at the full path still match.
    """

    def __init__(self, app, prefix: str = "/api/v1", exempt=()):
        self.app = app
        self.prefix = prefix.rstrip("/") + "/"
        self.exempt = {(method.upper(), path) for method, path in exempt}

    async def __call__(self, scope, receive, send):
        # Only apply to HTTP requests
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        path = scope["path"]
        trimmed = _trim_slash(path)
        if (scope["method"], trimmed) in self.exempt:
            rewritten = trimmed
        elif path.startswith(self.prefix):
            rewritten = _trim_slash("/" + path[len(self.prefix):])
        else:
            rewritten = trimmed

        if rewritten != path:
            logger.trace(f"Rewrote {path} -> {rewritten}")
            scope = dict(scope)
            scope["path"] = rewritten
            scope["raw_path"] = rewritten.encode("utf-8")

        await self.app(scope, receive, send)
