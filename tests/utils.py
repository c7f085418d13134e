from app.utils.auth import create_access_token


def auth_headers(email: str) -> dict:
    return {"Authorization": f"Bearer {create_access_token({'email': email})}"}


def miss_first_lookup(lookup):
    """The first call finds nothing, as if a concurrent request had not committed yet."""
    calls = []

    def wrapped(*args):
        calls.append(args)
        if len(calls) == 1:
            return None
        return lookup(*args)

    return wrapped
