from fastapi import Header


def get_actor(
    x_user_email: str | None = Header(default=None),
) -> str | None:
    """
    Attribution only: authentication is handled by the identity provider in front of
    this service, which forwards the signed-in user's email as X-User-Email.
    Example: X-User-Email: planner@local.test
    """
    if not x_user_email:
        return None
    return x_user_email.strip().lower() or None
